import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("routing", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Seller",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                (
                    "seller_type",
                    models.CharField(
                        choices=[("INDIVIDUAL", "Particulier"), ("COMPANY", "Entreprise")],
                        db_index=True,
                        default="INDIVIDUAL",
                        max_length=20,
                        verbose_name="type de vendeur",
                    ),
                ),
                ("name", models.CharField(max_length=100, verbose_name="nom")),
                ("email", models.EmailField(max_length=200, verbose_name="email")),
                (
                    "verification_status",
                    models.CharField(
                        choices=[
                            ("PENDING", "En attente"),
                            ("VERIFIED", "Verifie"),
                            ("REJECTED", "Rejete"),
                            ("SUSPENDED", "Suspendu"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                        verbose_name="statut de verification",
                    ),
                ),
                ("is_active", models.BooleanField(default=False, verbose_name="actif")),
                ("verified_at", models.DateTimeField(blank=True, null=True, verbose_name="verifie le")),
                ("rejection_reason", models.TextField(blank=True, default="", verbose_name="motif de rejet")),
                (
                    "commission_rate",
                    models.DecimalField(
                        blank=True,
                        decimal_places=4,
                        help_text="Entre 0 et 1 (0.15 = 15%). Vide = taux par defaut.",
                        max_digits=5,
                        null=True,
                        verbose_name="taux de commission",
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=100, null=True, verbose_name="prenom")),
                ("last_name", models.CharField(blank=True, max_length=100, null=True, verbose_name="nom de famille")),
                ("birth_date", models.DateField(blank=True, null=True, verbose_name="date de naissance")),
                ("company_name", models.CharField(blank=True, max_length=200, null=True, verbose_name="raison sociale")),
                ("vat_number", models.CharField(blank=True, max_length=100, null=True, verbose_name="numero de TVA")),
                (
                    "legal_form",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("LLC", "SARL"),
                            ("INC", "Inc."),
                            ("CORPORATION", "Societe anonyme"),
                            ("PARTNERSHIP", "Societe de personnes"),
                            ("SOLE_PROPRIETORSHIP", "Entreprise individuelle"),
                            ("OTHER", "Autre"),
                        ],
                        max_length=50,
                        null=True,
                        verbose_name="forme juridique",
                    ),
                ),
                (
                    "channel",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="seller",
                        to="routing.channel",
                        verbose_name="canal",
                    ),
                ),
            ],
            options={
                "verbose_name": "vendeur",
                "verbose_name_plural": "vendeurs",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("seller_type", "COMPANY"), ("vat_number__isnull", False)),
                        fields=("vat_number",),
                        name="uniq_company_seller_vat_number",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("name", ""), _negated=True),
                        name="seller_name_not_empty",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("email", ""), _negated=True),
                        name="seller_email_not_empty",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("seller_type", "COMPANY"), _negated=True),
                            models.Q(("company_name__isnull", False), models.Q(("company_name", ""), _negated=True)),
                            _connector="OR",
                        ),
                        name="company_seller_has_company_name",
                    ),
                ],
            },
        ),
    ]
