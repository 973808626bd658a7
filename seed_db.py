"""
Database seeding script - Creates the lookup catalog and a demo company
Run this once after your database is set up:
    python seed_db.py
"""

from app.db.session import SessionLocal, Base, engine
from app.models.lookup import Lookup, LookupCategory
from app.models.company import Company
from app.models.branch import Branch
from app.models.zone import Zone
from app.models.contract import Contract
from app.models.user import User
from app.models import ticket, file  # noqa: F401  register mappers
from app.core.roles import Role
from app.core.security import create_access_token
from sqlalchemy.exc import IntegrityError

TICKET_TYPES = [("Corrective", "تصحيحي"), ("Preventive", "وقائي"), ("Emergency", "طارئ")]
TICKET_STATUSES = [("Pending", "قيد الانتظار"), ("In Progress", "قيد التنفيذ"), ("Completed", "مكتمل"), ("Cancelled", "ملغي")]
MAIN_SERVICES = {
    ("HVAC", "التكييف"): [("AC Repair", "إصلاح المكيفات"), ("Duct Cleaning", "تنظيف مجاري الهواء")],
    ("Electrical", "الكهرباء"): [("Lighting", "الإنارة"), ("Wiring", "التمديدات")],
    ("Plumbing", "السباكة"): [("Leak Repair", "إصلاح التسربات")],
}
TOOLS = [("Ladder", "سلم"), ("Multimeter", "جهاز قياس"), ("Pipe Wrench", "مفتاح أنابيب")]


def _add_lookups(db, category, rows, parent_id=None, default_name=None):
    created = []
    for order, (name, name_arabic) in enumerate(rows, start=1):
        lookup = Lookup(
            category=category,
            name=name,
            name_arabic=name_arabic,
            order_id=order,
            is_active=True,
            is_default=(name == default_name),
            parent_lookup_id=parent_id,
        )
        db.add(lookup)
        created.append(lookup)
    db.flush()
    return created


def seed_database():
    """Create tables, the reference lookups and a demo company with an admin"""

    # Create all tables
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✓ Tables created successfully\n")

    db = SessionLocal()

    try:
        # Check if the catalog already exists
        if db.query(Lookup).filter(Lookup.category == LookupCategory.TICKET_STATUS).first():
            print("⚠ Lookup catalog already seeded, skipping...\n")
            return

        _add_lookups(db, LookupCategory.TICKET_TYPE, TICKET_TYPES)
        _add_lookups(db, LookupCategory.TICKET_STATUS, TICKET_STATUSES, default_name="Pending")
        mains = _add_lookups(db, LookupCategory.MAIN_SERVICE, list(MAIN_SERVICES))
        for main, subs in zip(mains, MAIN_SERVICES.values()):
            _add_lookups(db, LookupCategory.SUB_SERVICE, subs, parent_id=main.id)
        _add_lookups(db, LookupCategory.TOOL, TOOLS)

        company = Company(title="Gamma Solutions", is_active=True)
        db.add(company)
        db.flush()

        branch = Branch(company_id=company.id, branch_title="Head Office", branch_name_english="Head Office")
        db.add(branch)
        db.flush()
        db.add(Zone(branch_id=branch.id, zone_title="Ground Floor", zone_number="Z-01"))
        db.add(Contract(company_id=company.id, contract_reference="CNT-001", contract_title="Annual Maintenance"))

        admin = User(
            company_id=company.id,
            user_role_id=int(Role.ADMIN),
            full_name="Demo Admin",
            email="admin@example.com",
            is_active=True,
        )
        db.add(admin)
        db.commit()

        print("✓ Lookup catalog and demo company created successfully\n")
        print("Demo admin:")
        print(f"  User ID: {admin.id}")
        print(f"  Access token: {create_access_token(str(admin.id))}")
        print()

    except IntegrityError:
        db.rollback()
        print("⚠ Seed data already exists\n")
    except Exception as e:
        db.rollback()
        print(f"✗ Error seeding database: {str(e)}\n")
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
