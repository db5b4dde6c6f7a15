from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="HL7MaskLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("source_system", models.CharField(blank=True, max_length=50)),
                ("message_type", models.CharField(blank=True, max_length=20)),
                ("segment_count", models.IntegerField(default=0)),
                ("masked_segment_count", models.IntegerField(default=0)),
                ("masked_field_count", models.IntegerField(default=0)),
                ("input_length", models.IntegerField(default=0)),
            ],
        ),
    ]
