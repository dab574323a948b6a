"""Initialize the database tables and the upload directories.

Usage:
  python scripts/init_db.py                                  # tables + upload dirs
  python scripts/init_db.py --release-visual-diff-locks      # also fail every GENERATING row
  python scripts/init_db.py --release-visual-diff-locks --older-than 600
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from manuscript_workflow.config import settings
from manuscript_workflow.database import Base, SessionLocal, engine
import manuscript_workflow.models  # noqa: F401 - registers all models
from manuscript_workflow.services import visual_diff_service
from manuscript_workflow.utils.file_paths import resolve_upload_path


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--release-visual-diff-locks",
        action="store_true",
        help="Mark visual diffs left in GENERATING by a stopped worker as FAILED",
    )
    parser.add_argument(
        "--older-than",
        type=int,
        default=None,
        help="Only release locks held longer than this many seconds",
    )
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    print(f"[OK] tables created ({engine.url.get_backend_name()})")

    for path in (settings.UPLOAD_DIR, resolve_upload_path(settings.VISUAL_DIFF_DIR)):
        os.makedirs(path, exist_ok=True)
        print(f"[OK] directory ready: {os.path.abspath(path)}")

    if args.release_visual_diff_locks:
        db = SessionLocal()
        try:
            released = visual_diff_service.release_stale_locks(db, args.older_than)
        finally:
            db.close()
        print(f"[OK] released visual diff locks: {released}")


if __name__ == "__main__":
    main()
