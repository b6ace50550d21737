from ._import import ImportCommand


class Command(ImportCommand):
    help = "Bulk-seed affiliated colleges from an AISHE export, linking each to its university"
    action = "colleges"
