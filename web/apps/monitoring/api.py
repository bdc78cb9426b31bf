from django.conf import settings
from django.db import connection
from django.http import JsonResponse

def health_view(_request):
    db_ok = False
    try:
        with connection.cursor() as cur:
            cur.execute("SELECT 1;")
        db_ok = True
    except Exception:
        db_ok = False

    # the stub adapter needs no credentials
    use_http = getattr(settings, "USE_HTTP_ADAPTERS", True)
    gateway_ok = bool(getattr(settings, "MONOPAY_TOKEN", "")) or not use_http

    ok = db_ok and gateway_ok
    code = 200 if ok else 503
    return JsonResponse(
        {
            "ok": ok,
            "components": {
                "db": {"ok": db_ok},
                "gateway": {"ok": gateway_ok, "adapter": "monopay" if use_http else "stub"},
            },
        },
        status=code,
    )
