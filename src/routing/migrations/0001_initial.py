from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Channel",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("code", models.CharField(max_length=100, unique=True, verbose_name="code")),
                ("token", models.CharField(max_length=100, unique=True, verbose_name="jeton")),
                ("is_default", models.BooleanField(default=False, verbose_name="canal par defaut")),
            ],
            options={
                "verbose_name": "canal",
                "verbose_name_plural": "canaux",
                "ordering": ["code"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("is_default", True)),
                        fields=("is_default",),
                        name="uniq_default_channel",
                    ),
                ],
            },
        ),
    ]
