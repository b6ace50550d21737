"""AISHE directory importer: reconcile spreadsheet exports into the catalog."""
