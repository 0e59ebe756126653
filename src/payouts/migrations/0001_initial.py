import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("sellers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payout",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="cree le")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="modifie le")),
                ("order_reference", models.CharField(max_length=100, verbose_name="reference commande")),
                ("amount", models.PositiveBigIntegerField(help_text="En unites mineures (centimes).", verbose_name="montant")),
                (
                    "commission",
                    models.PositiveBigIntegerField(
                        default=0,
                        help_text="Commission deduite, en unites mineures.",
                        verbose_name="commission",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("HOLD", "Bloque"),
                            ("PENDING", "En attente d'approbation"),
                            ("APPROVED", "Approuve"),
                            ("PAID", "Paye"),
                            ("REJECTED", "Rejete"),
                        ],
                        db_index=True,
                        default="HOLD",
                        max_length=20,
                        verbose_name="statut",
                    ),
                ),
                ("released_at", models.DateTimeField(blank=True, null=True, verbose_name="libere le")),
                ("approved_at", models.DateTimeField(blank=True, null=True, verbose_name="approuve le")),
                ("paid_at", models.DateTimeField(blank=True, null=True, verbose_name="paye le")),
                ("rejected_at", models.DateTimeField(blank=True, null=True, verbose_name="rejete le")),
                ("failure_reason", models.TextField(blank=True, default="", verbose_name="motif")),
                (
                    "seller",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payouts",
                        to="sellers.seller",
                        verbose_name="vendeur",
                    ),
                ),
            ],
            options={
                "verbose_name": "versement vendeur",
                "verbose_name_plural": "versements vendeurs",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["seller", "status"], name="payout_seller_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("seller", "order_reference"),
                        name="uniq_payout_per_seller_order",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="payout_amount_positive",
                    ),
                ],
            },
        ),
    ]
