from ._import import ImportCommand


class Command(ImportCommand):
    help = "Bulk-seed universities from an AISHE export (existing codes are skipped, never overwritten)"
    action = "universities"
