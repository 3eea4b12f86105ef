import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import core.models
import core.validators


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Account',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(error_messages={'unique': 'A user with that email already exists.'}, help_text='Required. Login identifier.', max_length=254, unique=True, verbose_name='email address')),
                ('role', models.CharField(choices=[('user', 'User'), ('admin', 'Administrator')], default='user', help_text='Access tier used for authorization decisions.', max_length=10, verbose_name='role')),
                ('reset_password_token', models.CharField(blank=True, db_index=True, default='', help_text='SHA-256 hash of the pending password reset token.', max_length=64, verbose_name='reset password token')),
                ('reset_password_expire', models.DateTimeField(blank=True, null=True, verbose_name='reset password expiry')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'account',
                'verbose_name_plural': 'accounts',
                'ordering': ['-created_at'],
            },
            managers=[
                ('objects', core.models.AccountManager()),
            ],
        ),
        migrations.CreateModel(
            name='Vehicle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, verbose_name='name')),
                ('listing_type', models.CharField(choices=[('buy', 'For sale'), ('rent', 'For rent')], help_text='Whether the vehicle is for sale or for rent', max_length=4, verbose_name='type')),
                ('brand', models.CharField(max_length=50, verbose_name='brand')),
                ('model_name', models.CharField(max_length=50, verbose_name='model')),
                ('year', models.PositiveSmallIntegerField(validators=[core.validators.validate_vehicle_year], verbose_name='year')),
                ('mileage', models.PositiveIntegerField(blank=True, help_text='Odometer reading, required for vehicles for sale', null=True, verbose_name='mileage')),
                ('fuel', models.CharField(choices=[('petrol', 'Petrol'), ('diesel', 'Diesel'), ('electric', 'Electric'), ('hybrid', 'Hybrid'), ('other', 'Other')], max_length=10, verbose_name='fuel')),
                ('price', models.DecimalField(blank=True, decimal_places=2, help_text='Sale price, required for vehicles for sale', max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0, message='Price cannot be negative.')], verbose_name='price')),
                ('daily_rate', models.DecimalField(blank=True, decimal_places=2, help_text='Rental price per day, required for vehicles for rent', max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(0, message='Daily rate cannot be negative.')], verbose_name='daily rate')),
                ('passengers', models.PositiveSmallIntegerField(blank=True, help_text='Seating capacity, required for vehicles for rent', null=True, validators=[django.core.validators.MinValueValidator(1, message='Must seat at least 1 passenger.')], verbose_name='passengers')),
                ('description', models.CharField(max_length=1000, verbose_name='description')),
                ('images', models.JSONField(default=list, error_messages={'blank': 'At least one image is required for the vehicle.'}, validators=[core.validators.validate_image_urls], verbose_name='images')),
                ('is_featured', models.BooleanField(default=False, verbose_name='featured')),
                ('specs', models.JSONField(blank=True, default=dict, validators=[core.validators.validate_specs], verbose_name='specs')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('owner', models.ForeignKey(help_text='Administrator who listed the vehicle', on_delete=django.db.models.deletion.CASCADE, related_name='vehicles', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'vehicle',
                'verbose_name_plural': 'vehicles',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['listing_type'], name='core_vehicl_listing_5c0e1d_idx'),
                    models.Index(fields=['brand'], name='core_vehicl_brand_0b7f4a_idx'),
                    models.Index(fields=['is_featured'], name='core_vehicl_is_feat_8d2c61_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Favorite',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='created at')),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='favorite_records', to=settings.AUTH_USER_MODEL)),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='favorite_records', to='core.vehicle')),
            ],
            options={
                'verbose_name': 'favorite',
                'verbose_name_plural': 'favorites',
                'ordering': ['created_at', 'id'],
                'constraints': [
                    models.UniqueConstraint(fields=('account', 'vehicle'), name='unique_favorite_per_account'),
                ],
            },
        ),
        migrations.AddField(
            model_name='account',
            name='favorites',
            field=models.ManyToManyField(blank=True, related_name='favorited_by', through='core.Favorite', to='core.vehicle'),
        ),
        migrations.AddIndex(
            model_name='account',
            index=models.Index(fields=['role'], name='core_accoun_role_3f9a2b_idx'),
        ),
        migrations.AddIndex(
            model_name='account',
            index=models.Index(fields=['is_active'], name='core_accoun_is_acti_7e41c0_idx'),
        ),
        migrations.CreateModel(
            name='Reservation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled'), ('completed', 'Completed')], default='pending', max_length=10, verbose_name='status')),
                ('message', models.CharField(blank=True, default='', error_messages={'max_length': 'The message cannot exceed 500 characters.'}, max_length=500, verbose_name='message')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('start_date', models.DateField(verbose_name='start date')),
                ('end_date', models.DateField(verbose_name='end date')),
                ('total_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, verbose_name='total price')),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='reservations', to=settings.AUTH_USER_MODEL)),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='reservations', to='core.vehicle')),
            ],
            options={
                'verbose_name': 'reservation',
                'verbose_name_plural': 'reservations',
                'ordering': ['-created_at'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['status'], name='core_reserv_status_4b8e9d_idx'),
                    models.Index(fields=['account'], name='core_reserv_account_1d6f3a_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='TestDrive',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled'), ('completed', 'Completed')], default='pending', max_length=10, verbose_name='status')),
                ('message', models.CharField(blank=True, default='', error_messages={'max_length': 'The message cannot exceed 500 characters.'}, max_length=500, verbose_name='message')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('test_drive_date', models.DateTimeField(verbose_name='test drive date')),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='testdrives', to=settings.AUTH_USER_MODEL)),
                ('vehicle', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='testdrives', to='core.vehicle')),
            ],
            options={
                'verbose_name': 'test drive',
                'verbose_name_plural': 'test drives',
                'ordering': ['-created_at'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['status'], name='core_testdr_status_9a2c5e_idx'),
                    models.Index(fields=['account'], name='core_testdr_account_6e0b7f_idx'),
                ],
            },
        ),
    ]
