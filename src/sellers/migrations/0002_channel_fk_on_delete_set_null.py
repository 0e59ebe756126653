"""Move the seller -> channel cascade-to-null into the database.

Django emulates ``on_delete=SET_NULL`` in the ORM only.  On PostgreSQL the
foreign key is recreated with ``ON DELETE SET NULL`` so that channels deleted
outside the ORM never leave a dangling ``channel_id``.  SQLite keeps the
ORM behaviour.
"""
from django.db import migrations

DROP_EXISTING_FK = """
DO $$
DECLARE r record;
BEGIN
    FOR r IN
        SELECT c.conname
        FROM pg_constraint c
        JOIN pg_attribute a
          ON a.attrelid = c.conrelid AND a.attnum = ANY (c.conkey)
        WHERE c.conrelid = 'sellers_seller'::regclass
          AND c.contype = 'f'
          AND a.attname = 'channel_id'
    LOOP
        EXECUTE format('ALTER TABLE sellers_seller DROP CONSTRAINT %I', r.conname);
    END LOOP;
END $$;
"""

ADD_SET_NULL_FK = """
ALTER TABLE sellers_seller
    ADD CONSTRAINT sellers_seller_channel_id_fk_set_null
    FOREIGN KEY (channel_id) REFERENCES routing_channel (id)
    ON DELETE SET NULL
    DEFERRABLE INITIALLY DEFERRED;
"""

RESTORE_PLAIN_FK = """
ALTER TABLE sellers_seller DROP CONSTRAINT IF EXISTS sellers_seller_channel_id_fk_set_null;
ALTER TABLE sellers_seller
    ADD CONSTRAINT sellers_seller_channel_id_fk_routing_channel_id
    FOREIGN KEY (channel_id) REFERENCES routing_channel (id)
    DEFERRABLE INITIALLY DEFERRED;
"""


def forwards(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(DROP_EXISTING_FK, params=None)
    schema_editor.execute(ADD_SET_NULL_FK, params=None)


def backwards(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    schema_editor.execute(RESTORE_PLAIN_FK, params=None)


class Migration(migrations.Migration):

    dependencies = [
        ("sellers", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(forwards, backwards),
    ]
