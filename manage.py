#!/usr/bin/env python3
"""
Playerbook Management Script
Database setup and maintenance commands
"""

import sys
import argparse
import logging

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

REQUIRED_COLLECTIONS = ['academies', 'players']

class PlayerbookManager:
    """Main management class for playerbook operations"""

    def __init__(self):
        self.app = None
        self.celery = None

    def setup_app(self):
        """Set up Flask app"""
        if not self.app:
            from playerbook.app import create_app
            self.app, self.celery = create_app()
        return self.app, self.celery

    def init_database(self):
        """Create collections and indexes"""
        from playerbook.extensions import ensure_collection_exists
        from playerbook.services.stores import ensure_indexes

        app, _ = self.setup_app()
        with app.app_context():
            for collection_name in REQUIRED_COLLECTIONS:
                success, message = ensure_collection_exists(collection_name)
                if not success:
                    logger.error(message)
                    return 1
                logger.info(message)

            ensure_indexes()
        logger.info("Database initialization completed")
        return 0

    def check_indexes(self):
        """List indexes on the playerbook collections"""
        from playerbook.extensions import mongo

        app, _ = self.setup_app()
        with app.app_context():
            for collection_name in REQUIRED_COLLECTIONS:
                print(f"Indexes on {collection_name}:")
                for idx in mongo.db[collection_name].list_indexes():
                    print(f"  Name: {idx.get('name')}")
                    print(f"  Keys: {dict(idx.get('key'))}")
                    print(f"  Unique: {idx.get('unique', False)}")
        return 0

    def check_consistency(self):
        """Report players and academies that disagree about ownership"""
        from playerbook.services.consistency import find_inconsistencies

        app, _ = self.setup_app()
        with app.app_context():
            report = find_inconsistencies()

        problems = 0
        for kind, items in report.items():
            for item in items:
                print(f"{kind}: {item}")
                problems += 1

        if problems:
            print(f"{problems} inconsistencies found")
            return 1
        print("No inconsistencies found")
        return 0

    def start_celery_worker(self):
        """Start a Celery worker for the image cleanup tasks"""
        app, celery = self.setup_app()
        import playerbook.tasks  # noqa: F401

        loglevel = app.config.get('LOG_LEVEL', 'INFO').lower()
        logger.info("Starting Celery worker...")
        try:
            celery.worker_main([
                'worker',
                f'--loglevel={loglevel}',
                '--hostname=playerbook@%h',
                '--without-gossip',
                '--without-mingle'
            ])
        except KeyboardInterrupt:
            logger.info("Worker stopped by user")
        return 0

def main():
    """Main CLI interface"""
    parser = argparse.ArgumentParser(description='Playerbook Management Tool')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('init-db', help='Create collections and indexes')
    subparsers.add_parser('check-indexes', help='List collection indexes')
    subparsers.add_parser('check-consistency', help='Report academy/player ownership mismatches')
    subparsers.add_parser('celery-worker', help='Start Celery worker')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    manager = PlayerbookManager()

    if args.command == 'init-db':
        return manager.init_database()
    elif args.command == 'check-indexes':
        return manager.check_indexes()
    elif args.command == 'check-consistency':
        return manager.check_consistency()
    elif args.command == 'celery-worker':
        return manager.start_celery_worker()
    else:
        print(f"Unknown command: {args.command}")
        return 1

if __name__ == '__main__':
    sys.exit(main())
