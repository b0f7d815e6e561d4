from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('low_stock', 'Low Stock'), ('order_created', 'Order Created'), ('order_approved', 'Order Approved'), ('order_shipped', 'Order Shipped'), ('order_received', 'Order Received'), ('order_cancelled', 'Order Cancelled'), ('system', 'System')], db_index=True, default='system', max_length=30)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('reference_id', models.CharField(blank=True, help_text='Identifier of the order or product that triggered this', max_length=64, null=True)),
                ('reference_type', models.CharField(blank=True, help_text='Kind of record reference_id points to', max_length=50, null=True)),
                ('read', models.BooleanField(db_index=True, default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('user', models.ForeignKey(help_text='Recipient', on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Notification',
                'verbose_name_plural': 'Notifications',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['user', 'read'], name='notification_user_read_idx')],
            },
        ),
    ]
