from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="KeyValueEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(help_text="Document key (e.g., pharma_inventory)", max_length=100, unique=True)),
                ("value", models.JSONField(blank=True, help_text="Serialized document", null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Stored document",
                "verbose_name_plural": "Stored documents",
                "ordering": ["key"],
            },
        ),
    ]
