#!/usr/bin/env python3
"""
Shiptivity Clients Server
-------------------------
JSON API over the clients swimlane board, backed by a single SQLite DB.

Usage:
    python shiptivity_server.py
    python shiptivity_server.py --db ./clients.db --port 3001
    python shiptivity_server.py --seed clients.yaml   # fill an empty DB first

API:
    GET /                        → JSON: { message }
    GET /api/v1/clients          → JSON: [client, ...]
                                   optional ?status=backlog|in-progress|complete
    GET /api/v1/clients/<id>     → JSON: client
    PUT /api/v1/clients/<id>     → JSON body: { status?, priority? }
                                   Returns: every client, positions rebalanced
    GET /health                  → JSON: { status, db, lanes }

Errors are returned as { message, long_message } with a 4xx/5xx status.
"""

import atexit
import logging
import signal
import sys
import threading
from pathlib import Path

import yaml
from flask import Flask, jsonify, request

from pkg.shiptivity.config import ServerConfig
from pkg.shiptivity.errors import ShiptivityError
from pkg.shiptivity.reorder import apply_update, lane_violations
from pkg.shiptivity.schema import Lane
from pkg.shiptivity.store import ClientStore
from pkg.shiptivity.validation import validate_identifier, validate_status

logger = logging.getLogger("shiptivity")

app = Flask(__name__)
app.config.setdefault("DB_PATH", ServerConfig().db_path)

# ── Store lifecycle ──────────────────────────────────────────────────────────
# One connection is kept open for the life of the process and closed on
# SIGTERM / SIGINT / interpreter exit.

_store = None
# Reentrant: the signal handler may close the store from inside get_store()
_store_lock = threading.RLock()


def get_store() -> ClientStore:
    global _store
    with _store_lock:
        if _store is None:
            _store = ClientStore(str(app.config["DB_PATH"]))
            logger.info(f"Opened client store {_store.db_path}")
        return _store


def close_store() -> None:
    global _store
    with _store_lock:
        if _store is not None:
            _store.close()
            _store = None


def _handle_termination(signum, frame):
    logger.info(f"Received {signal.Signals(signum).name}, shutting down")
    close_store()
    sys.exit(0)


def seed_clients(store: ClientStore, seed_path: str) -> int:
    """
    Load clients from a YAML list into an empty store.

    Each entry needs ``name``; ``status``, ``position``, ``priority``,
    ``description`` and ``id`` are optional. Returns how many were added.
    """
    if store.count():
        logger.info(f"Store already has clients, skipping seed {seed_path}")
        return 0
    with open(seed_path, "r") as f:
        entries = yaml.safe_load(f) or []

    with store.transaction():
        for entry in entries:
            store.add(
                name=entry["name"],
                status=Lane(entry.get("status", "backlog")),
                position=entry.get("position"),
                priority=entry.get("priority"),
                description=entry.get("description"),
                client_id=entry.get("id"),
            )
    logger.info(f"Seeded {len(entries)} client(s) from {seed_path}")
    return len(entries)


# ── Errors ───────────────────────────────────────────────────────────────────

@app.errorhandler(ShiptivityError)
def handle_shiptivity_error(err: ShiptivityError):
    logger.warning(f"{request.method} {request.path} rejected: {err}")
    return jsonify(err.to_dict()), err.status_code


@app.errorhandler(Exception)
def handle_unexpected_error(err: Exception):
    # Werkzeug HTTP errors keep their code; redirects pass through untouched
    code = getattr(err, "code", None)
    if isinstance(code, int) and code < 400:
        return err
    if isinstance(code, int) and code < 500:
        return jsonify({
            "message": getattr(err, "name", "Error"),
            "long_message": getattr(err, "description", str(err)),
        }), code
    logger.exception(f"{request.method} {request.path} failed")
    return jsonify({
        "message": "Internal server error.",
        "long_message": str(err),
    }), 500


# ── Routes ───────────────────────────────────────────────────────────────────

@app.route("/")
def index():
    return jsonify({"message": "SHIPTIVITY API. Read documentation to see API docs"})


@app.route("/api/v1/clients", methods=["GET"])
def api_list_clients():
    """List all clients, optionally filtered by ?status=."""
    store = get_store()
    status = request.args.get("status")
    if status:
        clients = store.list_by_status(validate_status(status))
    else:
        clients = store.list_all()
    return jsonify([c.to_dict() for c in clients])


@app.route("/api/v1/clients/<client_id>", methods=["GET"])
def api_get_client(client_id):
    store = get_store()
    client = store.get(validate_identifier(client_id, store))
    return jsonify(client.to_dict())


@app.route("/api/v1/clients/<client_id>", methods=["PUT"])
def api_update_client(client_id):
    """
    Update a client's status and/or priority.

    A new status moves the card to that lane and clears its priority.
    A new priority (same lane) reorders the cards below it.
    Priority 1 is the most urgent. Returns every client on success.
    """
    store = get_store()
    client_id = validate_identifier(client_id, store)
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        data = {}
    clients = apply_update(
        store,
        client_id,
        status=data.get("status") or None,
        priority=data.get("priority"),
    )
    return jsonify([c.to_dict() for c in clients])


@app.route("/health")
def health():
    store = get_store()
    violations = lane_violations(store.list_all())
    return jsonify({
        "status": "degraded" if violations else "ok",
        "db": store.db_path,
        "lanes": violations,
    })


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Shiptivity Clients Server")
    parser.add_argument("--config", help="Path to shiptivity.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to clients.db (overrides SHIPTIVITY_DB env var)")
    parser.add_argument("--seed", help="YAML list of clients to load into an empty DB")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    args = parser.parse_args(argv)

    cfg = ServerConfig.load(args.config)
    if args.host:
        cfg.host = args.host
    if args.port:
        cfg.port = args.port
    if args.db:
        cfg.db_path = args.db
    if args.seed:
        cfg.seed_file = args.seed
    if args.log_level:
        cfg.log_level = args.log_level.upper()

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s [shiptivity] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    app.config["DB_PATH"] = str(Path(cfg.db_path).expanduser())
    store = get_store()
    atexit.register(close_store)
    signal.signal(signal.SIGTERM, _handle_termination)
    signal.signal(signal.SIGINT, _handle_termination)

    if cfg.seed_file:
        seed_clients(store, cfg.seed_file)

    logger.info(f"app running on http://{cfg.host}:{cfg.port} (db: {store.db_path})")
    app.run(host=cfg.host, port=cfg.port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
