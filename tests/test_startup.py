import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

BOOT = """
import django
django.setup()
from snappy.realtime import get_fanout
from snappy.users.authentication import BearerTokenAuthentication
print(type(get_fanout()).__name__, BearerTokenAuthentication.__name__)
"""


def test_django_boots_from_a_cold_interpreter():
    # A fresh process resolves the app registry, the realtime app and the
    # DRF authentication classes in the order a real server does.
    env = {**os.environ, "DJANGO_SETTINGS_MODULE": "config.settings.test"}
    result = subprocess.run(  # noqa: S603
        [sys.executable, "-c", BOOT],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
        check=False,
        timeout=60,
    )
    assert result.returncode == 0, result.stderr
    assert result.stdout.split() == ["Fanout", "BearerTokenAuthentication"]
