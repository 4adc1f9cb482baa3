import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('lms_core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='IntegrityAdvocateBlock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('context_level', models.CharField(choices=[('site', 'Site'), ('course', 'Course'), ('module', 'Course module')], default='module', max_length=20)),
                ('api_key', models.CharField(blank=True, default='', max_length=255)),
                ('app_id', models.CharField(blank=True, default='', max_length=64)),
                ('visible', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('course', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='integrity_advocate_blocks', to='lms_core.course')),
                ('module', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='integrity_advocate_blocks', to='lms_core.coursemodule')),
            ],
            options={
                'ordering': ['id'],
                'permissions': [('override_session', 'Can override Integrity Advocate session status')],
            },
        ),
    ]
