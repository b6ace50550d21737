from django.db import connection
from django.db.utils import OperationalError

from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response

from utils.errors import db_unavailable_response


@api_view(['GET'])
@authentication_classes([])
@permission_classes([])
def health(_request):
    try:
        with connection.cursor() as cur:
            cur.execute("SELECT 1")
    except OperationalError as e:
        return db_unavailable_response(e, detail="Database unreachable")
    return Response({"status": "ok"})
