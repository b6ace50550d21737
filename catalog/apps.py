from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """Django AppConfig for the catalog app (universities, colleges, import runs)."""
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'catalog'
