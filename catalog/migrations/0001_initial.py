import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='University',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('aishe_code', models.CharField(max_length=32, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('state', models.CharField(max_length=128)),
                ('district', models.CharField(max_length=128)),
                ('website', models.CharField(blank=True, max_length=255, null=True)),
                ('year_of_establishment', models.PositiveIntegerField(blank=True, null=True)),
                ('location', models.CharField(blank=True, max_length=255, null=True)),
            ],
            options={
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['state'], name='catalog_uni_state_3f1c2a_idx'),
                    models.Index(fields=['district'], name='catalog_uni_distric_8d0e4b_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='College',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('aishe_code', models.CharField(max_length=32, unique=True)),
                ('name', models.CharField(max_length=255)),
                ('state', models.CharField(max_length=128)),
                ('district', models.CharField(max_length=128)),
                ('website', models.CharField(blank=True, max_length=255, null=True)),
                ('year_of_establishment', models.PositiveIntegerField(blank=True, null=True)),
                ('location', models.CharField(blank=True, max_length=255, null=True)),
                ('college_type', models.CharField(blank=True, max_length=128, null=True)),
                ('management', models.CharField(blank=True, max_length=128, null=True)),
                ('university_aishe_code', models.CharField(blank=True, max_length=32, null=True)),
                ('university_name', models.CharField(blank=True, max_length=255, null=True)),
                ('university_type', models.CharField(blank=True, max_length=128, null=True)),
                ('university', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='colleges', to='catalog.university')),
            ],
            options={
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['state'], name='catalog_col_state_5a7d19_idx'),
                    models.Index(fields=['district'], name='catalog_col_distric_c2b6f0_idx'),
                    models.Index(fields=['college_type'], name='catalog_col_college_9e41d3_idx'),
                    models.Index(fields=['management'], name='catalog_col_managem_47b8aa_idx'),
                    models.Index(fields=['university_aishe_code'], name='catalog_col_univers_1d6c5e_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ImportRun',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('action', models.CharField(max_length=32)),
                ('source_path', models.CharField(blank=True, max_length=512)),
                ('batch_size', models.PositiveIntegerField(default=500)),
                ('status', models.CharField(choices=[('running', 'Running'), ('done', 'Done'), ('failed', 'Failed')], default='running', max_length=16)),
                ('started_at', models.DateTimeField(blank=True, null=True)),
                ('finished_at', models.DateTimeField(blank=True, null=True)),
                ('stats', models.JSONField(blank=True, default=dict)),
                ('error', models.TextField(blank=True)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='catalog_imp_action_6b2f90_idx'),
                ],
            },
        ),
    ]
