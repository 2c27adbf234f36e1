"""Lightweight web dashboard and operator API over HTTP.

Runs as an ``aiohttp`` web server alongside the sensor feed.
Exposes:
- ``GET  /``                          → HTML dashboard (auto-refreshes via JS)
- ``GET  /api/state``                 → zones, building stats, alert counts
- ``GET  /api/alerts[?status=...]``   → live alerts, newest first
- ``GET  /api/adjustments[?limit=N&zone=Z]`` → limit history, newest first
- ``GET  /api/notifications``         → dispatched notification feed
- ``GET  /api/export.csv``            → daily history as CSV
- ``POST /api/zones/{zone}/limit``    → ``{"limit": <kWh>}``
- ``POST /api/alerts/{id}/acknowledge``
- ``POST /api/alerts/{id}/resolve``   → optional ``{"note": "..."}``
- ``POST /api/alerts/{id}/notes``     → ``{"note": "..."}``
- ``DELETE /api/alerts/{id}``
"""

from __future__ import annotations

import json
import time
from typing import Any

import structlog
from aiohttp import web

from src.alerts.exceptions import AlertNotFoundError, AlertTransitionError
from src.building.monitor import BuildingMonitor
from src.core.types import AlertStatus
from src.monitor.dispatcher import AlertDispatcher
from src.power.exceptions import InvalidLimitError, UnknownZoneError

logger = structlog.get_logger(__name__)

MONITOR_KEY = web.AppKey("monitor", BuildingMonitor)
DISPATCHER_KEY = web.AppKey("dispatcher", AlertDispatcher)


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def _read_json(request: web.Request) -> dict[str, Any]:
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise web.HTTPBadRequest(
            text=json.dumps({"error": "Body must be UTF-8 JSON"}),
            content_type="application/json",
        ) from exc
    return data if isinstance(data, dict) else {}


def _build_state_json(monitor: BuildingMonitor) -> dict[str, Any]:
    return {
        "timestamp": time.time(),
        **monitor.snapshot(),
    }


DASHBOARD_HTML = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Campus Power Monitor</title>
<style>
  body { font-family: system-ui, sans-serif; background: #f3f4f6; color: #111827; margin: 0; padding: 20px; }
  h1 { font-size: 1.3rem; }
  .grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(320px, 1fr)); gap: 16px; }
  .card { background: #fff; border-radius: 8px; padding: 16px; box-shadow: 0 1px 3px rgba(0,0,0,.1); }
  table { width: 100%; border-collapse: collapse; font-size: .85rem; }
  td, th { padding: 4px 6px; text-align: left; border-bottom: 1px solid #e5e7eb; }
  .over { color: #dc2626; font-weight: 600; }
  .active { color: #dc2626; } .acknowledged { color: #ca8a04; } .resolved { color: #16a34a; }
</style>
</head>
<body>
<h1>Campus Power Monitor</h1>
<div class="grid">
  <div class="card"><h3>Building</h3><div id="stats"></div></div>
  <div class="card"><h3>Zones</h3><table id="zones"></table></div>
  <div class="card"><h3>Alerts</h3><table id="alerts"></table></div>
  <div class="card"><h3>Limit history</h3><table id="adjustments"></table></div>
</div>
<script>
async function post(url, body) {
  await fetch(url, {method: 'POST', headers: {'Content-Type': 'application/json'},
                    body: JSON.stringify(body || {})});
  refresh();
}
function alertUrl(id, action) {
  return '/api/alerts/' + encodeURIComponent(id) + (action ? '/' + action : '');
}
async function setLimit(zone) {
  const v = prompt('New limit (kWh) for ' + zone);
  if (v !== null) post('/api/zones/' + encodeURIComponent(zone) + '/limit', {limit: v});
}
async function dismiss(id) {
  await fetch(alertUrl(id), {method: 'DELETE'});
  refresh();
}
function t(ts) { return ts ? new Date(ts * 1000).toLocaleTimeString() : ''; }
// Server values are only ever assigned through textContent.
function cell(row, text, cls) {
  const td = row.insertCell();
  td.textContent = text;
  if (cls) td.className = cls;
  return td;
}
function button(td, label, onClick) {
  const b = document.createElement('button');
  b.textContent = label;
  b.addEventListener('click', onClick);
  td.appendChild(b);
}
function header(table, names) {
  const row = table.insertRow();
  for (const n of names) {
    const th = document.createElement('th');
    th.textContent = n;
    row.appendChild(th);
  }
}
async function refresh() {
  const s = await (await fetch('/api/state')).json();
  document.getElementById('stats').textContent =
    'Total usage: ' + s.total_usage.toFixed(0) + ' kWh · ' +
    'Average temperature: ' + s.average_temperature.toFixed(1) + ' °C · ' +
    'Total occupancy: ' + s.total_occupancy + ' · ' +
    'Alerts: ' + JSON.stringify(s.alerts);

  const zones = document.getElementById('zones');
  zones.replaceChildren();
  header(zones, ['Zone', 'Usage', 'Limit', '']);
  for (const z of s.zones) {
    const row = zones.insertRow();
    cell(row, z.zone);
    cell(row, z.usage === null ? '-' : z.usage.toFixed(1), z.violating ? 'over' : '');
    cell(row, z.limit || 'unset');
    button(cell(row, ''), 'Set', () => setLimit(z.zone));
  }

  const a = await (await fetch('/api/alerts')).json();
  const alerts = document.getElementById('alerts');
  alerts.replaceChildren();
  for (const x of a.alerts) {
    const row = alerts.insertRow();
    cell(row, x.status, x.status);
    cell(row, x.zone);
    cell(row, x.usage_at_detection.toFixed(1) + ' / ' + x.limit_at_detection);
    cell(row, t(x.detected_at));
    const actions = cell(row, '');
    if (x.status === 'active') button(actions, 'Ack', () => post(alertUrl(x.id, 'acknowledge')));
    if (x.status === 'acknowledged') button(actions, 'Resolve', () => post(alertUrl(x.id, 'resolve')));
    button(actions, 'x', () => dismiss(x.id));
  }

  const h = await (await fetch('/api/adjustments?limit=20')).json();
  const adjustments = document.getElementById('adjustments');
  adjustments.replaceChildren();
  for (const r of h.adjustments) {
    const row = adjustments.insertRow();
    cell(row, t(r.timestamp));
    cell(row, r.zone);
    cell(row, r.old_limit + ' → ' + r.new_limit);
    cell(row, r.reason);
  }
}
refresh();
setInterval(refresh, 5000);
</script>

</body>
</html>"""


# ── Read handlers ───────────────────────────────────────────────


async def _handle_index(request: web.Request) -> web.Response:
    return web.Response(text=DASHBOARD_HTML, content_type="text/html")


async def _handle_state(request: web.Request) -> web.Response:
    return web.json_response(_build_state_json(request.app[MONITOR_KEY]))


async def _handle_alerts(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    raw_status = request.query.get("status")
    status: AlertStatus | None = None
    if raw_status and raw_status != "all":
        try:
            status = AlertStatus(raw_status)
        except ValueError:
            return _error(400, f"Unknown status {raw_status!r}")
    alerts = monitor.alerts.list(status)
    return web.json_response({"alerts": [a.model_dump(mode="json") for a in alerts]})


async def _handle_adjustments(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    limit: int | None = None
    if "limit" in request.query:
        try:
            limit = max(int(request.query["limit"]), 0)
        except ValueError:
            return _error(400, "limit must be an integer")
    zone = request.query.get("zone")
    if zone:
        records = list(reversed(monitor.ledger.for_zone(zone)))[:limit]
    else:
        records = monitor.ledger.recent(limit)
    return web.json_response({
        "adjustments": [r.model_dump(mode="json") for r in records],
    })


async def _handle_notifications(request: web.Request) -> web.Response:
    dispatcher = request.app.get(DISPATCHER_KEY)
    messages = dispatcher.recent() if dispatcher is not None else []
    return web.json_response({
        "notifications": [
            {**m.model_dump(mode="json"), "severity": m.severity.name}
            for m in messages
        ],
    })


async def _handle_export(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    body = monitor.history.to_csv(monitor.zones)
    return web.Response(
        text=body,
        content_type="text/csv",
        charset="utf-8",
        headers={"Content-Disposition": 'attachment; filename="energy-data.csv"'},
    )


# ── Operator handlers ───────────────────────────────────────────


async def _handle_set_limit(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    zone = request.match_info["zone"]
    data = await _read_json(request)
    try:
        record = await monitor.set_limit(zone, data.get("limit"))
    except InvalidLimitError as exc:
        return _error(400, str(exc))
    except UnknownZoneError as exc:
        return _error(404, str(exc))
    return web.json_response({"adjustment": record.model_dump(mode="json")})


async def _handle_acknowledge(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    return await _alert_action(monitor.acknowledge(request.match_info["alert_id"]))


async def _handle_resolve(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    data = await _read_json(request)
    note = data.get("note")
    return await _alert_action(
        monitor.resolve(request.match_info["alert_id"], note=note if isinstance(note, str) else None),
    )


async def _handle_annotate(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    data = await _read_json(request)
    note = data.get("note")
    if not isinstance(note, str) or not note.strip():
        return _error(400, "note must be a non-empty string")
    return await _alert_action(monitor.annotate(request.match_info["alert_id"], note))


async def _handle_dismiss(request: web.Request) -> web.Response:
    monitor = request.app[MONITOR_KEY]
    return await _alert_action(monitor.dismiss(request.match_info["alert_id"]))


async def _alert_action(action: Any) -> web.Response:
    try:
        alert = await action
    except AlertNotFoundError as exc:
        return _error(404, str(exc))
    except AlertTransitionError as exc:
        return _error(409, str(exc))
    return web.json_response({"alert": alert.model_dump(mode="json")})


# ── App factory ─────────────────────────────────────────────────


def create_web_app(
    monitor: BuildingMonitor,
    dispatcher: AlertDispatcher | None = None,
) -> web.Application:
    """Create the aiohttp web application."""
    app = web.Application()
    app[MONITOR_KEY] = monitor
    if dispatcher is not None:
        app[DISPATCHER_KEY] = dispatcher
    app.router.add_get("/", _handle_index)
    app.router.add_get("/api/state", _handle_state)
    app.router.add_get("/api/alerts", _handle_alerts)
    app.router.add_get("/api/adjustments", _handle_adjustments)
    app.router.add_get("/api/notifications", _handle_notifications)
    app.router.add_get("/api/export.csv", _handle_export)
    app.router.add_post("/api/zones/{zone}/limit", _handle_set_limit)
    app.router.add_post("/api/alerts/{alert_id}/acknowledge", _handle_acknowledge)
    app.router.add_post("/api/alerts/{alert_id}/resolve", _handle_resolve)
    app.router.add_post("/api/alerts/{alert_id}/notes", _handle_annotate)
    app.router.add_delete("/api/alerts/{alert_id}", _handle_dismiss)
    return app


async def start_web_dashboard(
    monitor: BuildingMonitor,
    dispatcher: AlertDispatcher | None = None,
    host: str = "127.0.0.1",
    port: int = 8080,
) -> web.AppRunner:
    """Start the web dashboard server. Returns the runner for cleanup."""
    app = create_web_app(monitor, dispatcher)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info("dashboard_started", host=host, port=port)
    return runner
