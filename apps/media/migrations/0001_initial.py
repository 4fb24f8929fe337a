import uuid

import django.core.validators
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
            name='Asset',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kind', models.CharField(choices=[('video', 'Video'), ('image', 'Image')], default='video', max_length=10)),
                ('public_id', models.CharField(max_length=255)),
                ('title', models.CharField(max_length=200, validators=[django.core.validators.MaxLengthValidator(200)])),
                ('description', models.TextField(blank=True, default='')),
                ('original_size', models.PositiveBigIntegerField(default=0)),
                ('compressed_size', models.PositiveBigIntegerField(default=0)),
                ('duration', models.FloatField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('format', models.CharField(blank=True, default='', max_length=20)),
                ('width', models.PositiveIntegerField(blank=True, null=True)),
                ('height', models.PositiveIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assets', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='media_asset_user_created_idx'),
                    models.Index(fields=['public_id'], name='media_asset_public_id_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('duration__gte', 0)), name='media_asset_duration_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Draft',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('caption', models.TextField(blank=True, default='')),
                ('output_format', models.CharField(choices=[('Instagram Square', 'Instagram Square'), ('Instagram Portrait', 'Instagram Portrait'), ('X Post', 'X Post'), ('X Header', 'X Header'), ('Facebook Cover', 'Facebook Cover'), ('LinkedIn Post', 'LinkedIn Post'), ('Snapchat Story', 'Snapchat Story')], max_length=50)),
                ('thumbnail_public_id', models.CharField(blank=True, default='', max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('asset', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='drafts', to='media.asset')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='drafts', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-updated_at'],
            },
        ),
        migrations.CreateModel(
            name='Favorite',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('asset', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='favorites', to='media.asset')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='favorites', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('user', 'asset'), name='media_favorite_unique_per_user'),
                ],
            },
        ),
    ]
