MANAGE_PRODUCT_TERMS = "manage_product_terms"

# Role-based capability definitions using sets for O(1) lookup
ROLE_CAPABILITIES = {
    "administrator": {"*"},  # Administrator has all capabilities
    "shop_manager": {MANAGE_PRODUCT_TERMS, "edit_products"},
    "editor": {"edit_posts"},
    "customer": set(),
}


def has_capability(role, capability):
    """
    Check if a role grants a specific capability.

    Unknown or missing roles grant nothing.
    """
    capabilities = ROLE_CAPABILITIES.get(role or "", set())
    return "*" in capabilities or capability in capabilities
