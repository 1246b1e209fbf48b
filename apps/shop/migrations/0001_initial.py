from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ShopConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('base_currency', models.CharField(blank=True, help_text='ISO code, e.g. NZD', max_length=3)),
                ('base_currency_symbol', models.CharField(blank=True, default='$', max_length=10)),
                ('base_currency_precision', models.PositiveSmallIntegerField(default=2)),
                ('cart_timeout', models.PositiveIntegerField(default=1)),
                ('cart_timeout_unit', models.CharField(choices=[('hour', 'Hour'), ('day', 'Day'), ('week', 'Week')], default='hour', max_length=10)),
                ('receipt_from', models.EmailField(blank=True, max_length=254)),
                ('receipt_subject', models.CharField(blank=True, default='Your order receipt', max_length=255)),
                ('receipt_body', models.TextField(blank=True)),
                ('email_signature', models.TextField(blank=True)),
            ],
            options={
                'verbose_name': 'Shop settings',
                'verbose_name_plural': 'Shop settings',
            },
        ),
    ]
