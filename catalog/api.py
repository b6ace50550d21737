from django.conf import settings
from django.db.utils import OperationalError, ProgrammingError

from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response

from utils.errors import db_unavailable_response


def _serialize_run(r) -> dict:
    return {
        'id': r.id,
        'action': r.action,
        'status': r.status,
        'source_path': r.source_path,
        'batch_size': r.batch_size,
        'started_at': r.started_at.isoformat() if r.started_at else None,
        'finished_at': r.finished_at.isoformat() if r.finished_at else None,
        'created_at': r.created_at.isoformat() if r.created_at else None,
        'stats': r.stats or {},
        'error': r.error or '',
    }


@api_view(['GET'])
@authentication_classes([])
@permission_classes([])
def api_catalog_status(_request):
    """GET /api/catalog/status
    Row counts for universities/colleges and the most recent import run per action.
    """
    from catalog.models import College, ImportRun, University

    out: dict = {
        'status': 'ok',
        'database': {},
        'catalog': {'available': False, 'counts': {}},
        'imports': {'last_run': None, 'last_by_action': {}},
        'warnings': [],
    }

    db_conf = (getattr(settings, 'DATABASES', {}) or {}).get('default') or {}
    out['database'] = {
        'engine': str(db_conf.get('ENGINE') or ''),
        'name': str(db_conf.get('NAME') or ''),
    }

    try:
        colleges = int(College.objects.count())
        linked = int(College.objects.filter(university__isnull=False).count())
        out['catalog'] = {
            'available': True,
            'counts': {
                'universities': int(University.objects.count()),
                'colleges': colleges,
                'colleges_linked': linked,
                'colleges_unlinked': colleges - linked,
            },
        }
        last = ImportRun.objects.order_by('-created_at', '-id').first()
        if last:
            out['imports']['last_run'] = _serialize_run(last)
        for action in ('universities', 'colleges'):
            r = ImportRun.objects.filter(action=action).order_by('-created_at', '-id').first()
            if r:
                out['imports']['last_by_action'][action] = _serialize_run(r)
    except (ProgrammingError, OperationalError) as e:
        return db_unavailable_response(e)

    warnings: list[str] = []
    counts = out['catalog']['counts']
    if counts.get('universities', 0) == 0 or counts.get('colleges', 0) == 0:
        warnings.append('catalog_db_empty')
    last_run = out['imports']['last_run']
    if last_run and last_run.get('status') == ImportRun.Status.FAILED:
        warnings.append('last_import_failed')
    out['warnings'] = warnings
    return Response(out)
