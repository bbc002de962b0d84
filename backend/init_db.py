"""
Initialize the ad server database and load the JSON seed files
Run this script once before starting the server
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from adserver.config import settings
from adserver.database import SessionLocal, init_db
from adserver.errors import FatalError
from adserver.services.preload import SeedLoader

def init_database():
    """Create tables and load seed data"""
    
    print("=" * 60)
    print(f"{settings.APP_NAME} - Database Initialization")
    print("=" * 60)
    
    print("\nCreating database tables...")
    try:
        init_db()
        print("Database tables created successfully!")
    except FatalError as e:
        print(f"Error creating tables: {e.message}")
        sys.exit(1)
    
    db = SessionLocal()
    try:
        summary = SeedLoader(db).load_all(
            settings.PRELOAD_CAMPAIGNS_FILE,
            settings.PRELOAD_ADS_FILE,
            settings.PRELOAD_EVENTS_FILE
        )
        print(f"\nCampaigns loaded: {summary.campaigns}")
        print(f"Ads loaded:       {summary.ads}")
        print(f"Events loaded:    {summary.events}")
        print(f"Records skipped:  {summary.skipped}")
    finally:
        db.close()
        print()

if __name__ == "__main__":
    init_database()
