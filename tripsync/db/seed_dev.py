"""Dev seeding helper for stub authentication."""

from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from tripsync.api.auth import DEFAULT_TEST_USER_ID
from tripsync.config import get_settings
from tripsync.db.engine import create_engine_from_settings, create_session_factory
from tripsync.db.models import Room, RoomMember, RoomPreference

# Fixed room matching the stub auth user in tripsync/api/auth.py
DEV_ROOM_ID = 1
DEV_USER_ID = DEFAULT_TEST_USER_ID

DEV_PREFERENCES = [
    ("place", "Gyeongbokgung Palace", "TOURIST_SPOT"),
    ("place", "Gwangjang Market", "RESTAURANT"),
    ("must_visit", "Gyeongbokgung Palace", None),
    ("rule", "No activities before 9am", None),
    ("chat", "Let's keep the second day relaxed", None),
]


def seed_dev_room(session_factory: sessionmaker[Session] | None = None) -> None:
    """Seed a dev room with the stub user as its member.

    This function is idempotent - safe to run multiple times.
    Creates:
    - Room DEV_ROOM_ID (Seoul, three days starting a week from today)
    - Active membership for DEV_USER_ID
    - A handful of chat-derived preferences
    """
    if session_factory is None:
        session_factory = create_session_factory(create_engine_from_settings(get_settings()))

    with session_factory() as session, session.begin():
        room = session.get(Room, DEV_ROOM_ID)
        if room is None:
            start = date.today() + timedelta(days=7)
            print(f"Creating dev room with id {DEV_ROOM_ID}...")
            session.add(
                Room(
                    room_id=DEV_ROOM_ID,
                    destination="Seoul",
                    start_date=start,
                    end_date=start + timedelta(days=2),
                )
            )
            session.add_all(
                RoomPreference(room_id=DEV_ROOM_ID, kind=kind, content=content, place_tag=tag)
                for kind, content, tag in DEV_PREFERENCES
            )
        else:
            print(f"Dev room already exists: {room.destination}")

        member = session.scalars(
            select(RoomMember).where(
                RoomMember.room_id == DEV_ROOM_ID, RoomMember.user_id == DEV_USER_ID
            )
        ).first()
        if member is None:
            print(f"Adding dev user {DEV_USER_ID} to room {DEV_ROOM_ID}...")
            session.add(RoomMember(room_id=DEV_ROOM_ID, user_id=DEV_USER_ID, is_active=True))

    print("Dev seeding complete")


if __name__ == "__main__":
    seed_dev_room()
