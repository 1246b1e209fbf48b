from decimal import Decimal
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Processing', 'Processing'), ('Dispatched', 'Dispatched'), ('Cancelled', 'Cancelled'), ('Cart', 'Cart'), ('Standing Order', 'Standing Order')], db_index=True, default='Cart', max_length=20)),
                ('payment_status', models.CharField(choices=[('Unpaid', 'Unpaid'), ('Paid', 'Paid'), ('Standing', 'Standing')], default='Unpaid', max_length=10)),
                ('redirect_url_hit', models.BooleanField(default=False)),
                ('total_price', models.DecimalField(decimal_places=8, default=Decimal('0'), max_digits=19)),
                ('sub_total_price', models.DecimalField(decimal_places=8, default=Decimal('0'), max_digits=19)),
                ('base_currency', models.CharField(blank=True, max_length=3)),
                ('base_currency_symbol', models.CharField(blank=True, max_length=10)),
                ('ordered_on', models.DateTimeField(blank=True, null=True)),
                ('last_active', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('env', models.CharField(blank=True, max_length=10)),
                ('member', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-id'],
            },
        ),
        migrations.CreateModel(
            name='StandingOrder',
            fields=[
                ('order_ptr', models.OneToOneField(auto_created=True, on_delete=django.db.models.deletion.CASCADE, parent_link=True, primary_key=True, serialize=False, to='orders.order')),
                ('frequency', models.CharField(choices=[('Weekly', 'Weekly'), ('Fortnightly', 'Fortnightly')], default='Weekly', max_length=20)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('name', models.CharField(blank=True, max_length=255)),
                ('enabled', models.BooleanField(default=True)),
            ],
            options={
                'ordering': ['-id'],
            },
            bases=('orders.order',),
        ),
        migrations.AddField(
            model_name='order',
            name='standing_order',
            field=models.ForeignKey(blank=True, help_text='The standing order this order was placed from', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='orders', to='orders.standingorder'),
        ),
        migrations.CreateModel(
            name='Item',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_version', models.PositiveIntegerField(default=1)),
                ('variation_version', models.PositiveIntegerField(blank=True, null=True)),
                ('price', models.DecimalField(decimal_places=8, default=Decimal('0'), max_digits=19)),
                ('quantity', models.IntegerField(default=1)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='orders.order')),
                ('product', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='order_items', to='catalog.product')),
                ('variation', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='order_items', to='catalog.variation')),
            ],
            options={
                'ordering': ['pk'],
            },
        ),
        migrations.CreateModel(
            name='ItemOption',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.CharField(max_length=255)),
                ('price', models.DecimalField(decimal_places=8, default=Decimal('0'), max_digits=19)),
                ('item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='item_options', to='orders.item')),
            ],
        ),
        migrations.CreateModel(
            name='Modification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('modifier', models.CharField(help_text='Registry key of the modifier that added this', max_length=100)),
                ('value', models.CharField(blank=True, max_length=255)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('price', models.DecimalField(decimal_places=8, default=Decimal('0'), max_digits=19)),
                ('sub_total_modifier', models.BooleanField(default=False)),
                ('sort', models.IntegerField(default=0)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='modifications', to='orders.order')),
            ],
            options={
                'ordering': ['sort', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='OrderUpdate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(blank=True, choices=[('Pending', 'Pending'), ('Processing', 'Processing'), ('Dispatched', 'Dispatched'), ('Cancelled', 'Cancelled')], max_length=20)),
                ('note', models.TextField(blank=True)),
                ('visible', models.BooleanField(default=False, help_text='Show this update to the customer')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('member', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='order_updates', to=settings.AUTH_USER_MODEL)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='updates', to='orders.order')),
            ],
            options={
                'ordering': ['created_at', 'pk'],
            },
        ),
    ]
