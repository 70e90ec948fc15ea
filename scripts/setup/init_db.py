"""
Initialize database: creates all tables.
Optionally seeds one business, venue and area plus an OWNER profile so the
door app has something to count against.
Usage: python scripts/setup/init_db.py [--seed --owner-id <auth uid> --owner-email <email>]
"""

import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from datetime import datetime
from sqlalchemy import inspect, text

from clicr.config import settings
from clicr.database import SessionLocal, create_tables, engine
from clicr.models.area import Area
from clicr.models.business import Business
from clicr.models.occupancy_snapshot import OccupancySnapshot
from clicr.models.profile import Profile
from clicr.models.venue import Venue


def seed(owner_id: str, owner_email: str):
    db = SessionLocal()
    try:
        now = datetime.utcnow()
        business = Business(name="Demo Business", created_at=now)
        db.add(business)
        db.flush()
        venue = Venue(business_id=business.id, name="Demo Venue", default_capacity_total=200,
                      capacity_enforcement_mode="WARN_ONLY", created_at=now, updated_at=now)
        db.add(venue)
        db.flush()
        area = Area(venue_id=venue.id, name="Main Floor", created_at=now, updated_at=now)
        db.add(area)
        db.flush()
        db.add(OccupancySnapshot(area_id=area.id, venue_id=venue.id, business_id=business.id,
                                 current_occupancy=0, updated_at=now))
        db.add(Profile(id=owner_id, business_id=business.id, name=owner_email.split("@")[0],
                       email=owner_email, role="OWNER", assigned_venue_ids=[venue.id],
                       assigned_area_ids=[area.id], assigned_device_ids=[], created_at=now))
        db.commit()
        print(f"🌱 Seeded business={business.id} venue={venue.id} area={area.id} owner={owner_id}")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Create Clicr tables")
    parser.add_argument("--seed", action="store_true", help="Insert a demo business/venue/area")
    parser.add_argument("--owner-id", default="owner-1")
    parser.add_argument("--owner-email", default="owner@example.com")
    args = parser.parse_args()

    print("🗄️  Clicr DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if args.seed:
        seed(args.owner_id, args.owner_email)

    print("\n🎉 Database ready! You can now start the backend:")
    print(f"   uvicorn clicr.main:app --host {settings.BACKEND_IP} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
