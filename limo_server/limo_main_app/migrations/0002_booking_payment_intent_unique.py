from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('limo_main_app', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='booking',
            name='payment_intent_id',
            field=models.CharField(blank=True, max_length=64, null=True, unique=True),
        ),
    ]
