import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('departments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='TaskMetrics',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(db_index=True)),
                ('total_tasks', models.PositiveIntegerField(default=0)),
                ('completed_tasks', models.PositiveIntegerField(default=0)),
                ('pending_tasks', models.PositiveIntegerField(default=0)),
                ('overdue_tasks', models.PositiveIntegerField(default=0)),
                ('average_completion_time', models.FloatField(default=0, help_text='Mean hours from creation to completion')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='task_metrics', to='departments.department')),
            ],
            options={
                'verbose_name': 'task metrics',
                'verbose_name_plural': 'task metrics',
                'ordering': ['date'],
                'constraints': [
                    models.UniqueConstraint(fields=('department', 'date'), name='unique_task_metrics_per_day'),
                ],
            },
        ),
        migrations.CreateModel(
            name='UserPerformance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(db_index=True)),
                ('tasks_completed', models.PositiveIntegerField(default=0)),
                ('tasks_overdue', models.PositiveIntegerField(default=0)),
                ('average_response_time', models.FloatField(default=0, help_text='Mean hours from creation to first comment')),
                ('productivity_score', models.FloatField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='performance_snapshots', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'user performance',
                'verbose_name_plural': 'user performance',
                'ordering': ['date'],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'date'), name='unique_user_performance_per_day'),
                ],
            },
        ),
        migrations.CreateModel(
            name='DepartmentAnalytics',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(db_index=True)),
                ('total_employees', models.PositiveIntegerField(default=0)),
                ('active_employees', models.PositiveIntegerField(default=0)),
                ('department_efficiency', models.FloatField(default=0)),
                ('average_task_completion_time', models.FloatField(default=0, help_text='Mean hours from creation to completion')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='analytics', to='departments.department')),
            ],
            options={
                'verbose_name': 'department analytics',
                'verbose_name_plural': 'department analytics',
                'ordering': ['date'],
                'constraints': [
                    models.UniqueConstraint(fields=('department', 'date'), name='unique_department_analytics_per_day'),
                ],
            },
        ),
    ]
