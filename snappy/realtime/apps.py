from django.apps import AppConfig


class RealtimeConfig(AppConfig):
    name = "snappy.realtime"
    label = "realtime"

    def ready(self) -> None:
        from .fanout import Fanout  # noqa: PLC0415
        from .socketio import attach_handlers  # noqa: PLC0415
        from .socketio import build_server  # noqa: PLC0415

        self.sio = build_server()
        self.fanout = Fanout(self.sio)
        attach_handlers(self.sio, self.fanout)
        return super().ready()
