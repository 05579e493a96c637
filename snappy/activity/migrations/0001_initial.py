import django.core.serializers.json
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Activity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('create_todo', 'Create Todo'), ('update_todo', 'Update Todo'), ('complete_todo', 'Complete Todo'), ('delete_todo', 'Delete Todo'), ('create_list', 'Create List'), ('update_list', 'Update List'), ('delete_list', 'Delete List'), ('invite_user', 'Invite User'), ('remove_collaborator', 'Remove Collaborator'), ('update_collaborator', 'Update Collaborator')], max_length=32)),
                ('target_type', models.CharField(choices=[('todo', 'Todo'), ('list', 'List'), ('user', 'User')], max_length=10)),
                ('target_id', models.BigIntegerField()),
                ('list_id', models.BigIntegerField(blank=True, db_index=True, null=True)),
                ('payload', models.JSONField(blank=True, default=dict, encoder=django.core.serializers.json.DjangoJSONEncoder)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('actor', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activities', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'activities',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['actor', '-created_at'], name='activity_actor_recent'), models.Index(fields=['target_type', 'target_id'], name='activity_target')],
            },
        ),
    ]
