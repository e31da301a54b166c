"""Add per-role permissions and right-to-left language support."""

PERMISSION_DEFINITION = {
    "id": {
        "type": "{{TypeRef.UUID}}",
        "primaryKey": True,
        "allowNull": False,
        "unique": True,
        "defaultValue": "{{TypeRef.UUIDV4}}",
    },
    "name": {
        "type": "{{TypeRef.STRING}}",
        "allowNull": False,
        "validate": {"notEmpty": True},
    },
    "roleId": {
        "type": "{{TypeRef.UUID}}",
        "allowNull": True,
        "references": {"model": {"tableName": "Role", "schema": "{{TENANT}}"}, "key": "id"},
        "onDelete": "CASCADE",
    },
}

RIGHT_TO_LEFT = {
    "type": "{{TypeRef.BOOLEAN}}",
    "allowNull": False,
    "defaultValue": False,
}

TRANSLATIONS = {
    "frontend-tenant": {
        "permissions": {
            "title": "Permissions",
            "empty": "This role has no permissions yet.",
        }
    }
}


async def up(context):
    transaction = context.transaction
    await context.demo.restore(transaction)
    tenants = await context.all_tenants()

    await context.migrations.add_table_to_tenants(
        transaction, "Permission", PERMISSION_DEFINITION, tenants, insert_after="Role"
    )
    await context.migrations.add_column(
        transaction, "Language", "rightToLeft", RIGHT_TO_LEFT, tenants
    )
    await context.migrations.add_translations(transaction, TRANSLATIONS, tenants)

    await context.demo.backup(transaction)


async def down(context):
    transaction = context.transaction
    await context.demo.restore(transaction)
    tenants = await context.all_tenants()

    await context.migrations.remove_translations(
        transaction, context.migrations.get_translation_keys(TRANSLATIONS), tenants
    )
    await context.migrations.remove_column(transaction, "Language", "rightToLeft", tenants)
    await context.migrations.remove_table_from_tenants(transaction, "Permission", tenants)

    await context.demo.backup(transaction)
