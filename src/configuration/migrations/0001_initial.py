from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="GlobalSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "custom_fields",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Configuration cle/valeur partagee (ex: payoutScheduleFrequency).",
                        verbose_name="champs personnalises",
                    ),
                ),
            ],
            options={
                "verbose_name": "parametres globaux",
                "verbose_name_plural": "parametres globaux",
            },
        ),
    ]
