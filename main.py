import argparse

import uvicorn

from rrchess.core.database import SessionLocal
from rrchess.main import configure_logging
from rrchess.models import create_tables
from rrchess.services import import_service


def serve(args):
    uvicorn.run("rrchess.main:app", host=args.host, port=args.port, reload=args.reload)


def import_store(args):
    create_tables()
    db = SessionLocal()
    try:
        report = import_service.import_export(db, args.path)
    finally:
        db.close()
    print(f"Imported {report.players} players, {report.tournaments} tournaments, {report.matches} matches")
    for reason in report.skipped:
        print(f"  skipped {reason}")


def export_store(args):
    create_tables()
    db = SessionLocal()
    try:
        import_service.export_store(db, args.path)
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Round-robin chess tournament service")
    subparsers = parser.add_subparsers(dest="command")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")
    serve_parser.set_defaults(func=serve)

    import_parser = subparsers.add_parser("import", help="Import a JSON export, legacy record shapes included")
    import_parser.add_argument("path")
    import_parser.set_defaults(func=import_store)

    export_parser = subparsers.add_parser("export", help="Export the store as JSON")
    export_parser.add_argument("path")
    export_parser.set_defaults(func=export_store)

    args = parser.parse_args()
    configure_logging()
    if not getattr(args, "func", None):
        args = parser.parse_args(["serve"])
    args.func(args)


if __name__ == "__main__":
    main()
