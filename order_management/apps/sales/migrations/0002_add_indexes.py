from django.db import migrations, models


class Migration(migrations.Migration):
    """
    Add indexes on the columns the order screens filter by:
      - sales_order.status                (orders list filtered by status)
      - sales_order.created_at            (newest-first listing)
      - sales_order.(status, created_at)  composite — covers both at once
      - sales_voucher.(active, expires_at) available vouchers lookup
      - sales_product.name                (product search)
    """

    dependencies = [
        ('sales', '0001_initial'),
    ]

    operations = [
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['status'], name='sales_order_status_idx'),
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(fields=['created_at'], name='sales_order_created_at_idx'),
        ),
        migrations.AddIndex(
            model_name='order',
            index=models.Index(
                fields=['status', 'created_at'],
                name='sales_order_status_created_idx',
            ),
        ),
        migrations.AddIndex(
            model_name='voucher',
            index=models.Index(fields=['active', 'expires_at'], name='sales_voucher_available_idx'),
        ),
        migrations.AddIndex(
            model_name='product',
            index=models.Index(fields=['name'], name='sales_product_name_idx'),
        ),
    ]
