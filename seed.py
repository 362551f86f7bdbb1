from clipstudio.auth import get_password_hash
from clipstudio.database import SessionLocal, engine, Base
from clipstudio.models import Clip, ClipJob, SourceMedia, User

# Create tables
Base.metadata.create_all(bind=engine)

db = SessionLocal()

# Clear existing data
db.query(Clip).delete()
db.query(ClipJob).delete()
db.query(SourceMedia).delete()
db.query(User).delete()

user = User(
    email="demo@clipstudio.dev",
    hashed_password=get_password_hash("demo-password"),
    display_name="Demo Creator",
)
db.add(user)
db.commit()
db.refresh(user)

# Sample source media
media = [
    SourceMedia(
        user_id=user.id,
        file_name="episode-42-full.mp4",
        status="ready",
        duration_seconds=1845.0,
        file_url="https://media.clipstudio.dev/uploads/episode-42-full.mp4",
        thumbnail_url="https://media.clipstudio.dev/uploads/episode-42-full.jpg",
        transcript=(
            "Welcome back to the show. Today we're talking about why most creators "
            "quit in their first year, and the one habit that kept me going."
        ),
    ),
    SourceMedia(
        user_id=user.id,
        file_name="live-studio-session.mp4",
        status="ready",
        duration_seconds=95.0,
        file_url="https://media.clipstudio.dev/uploads/live-studio-session.mp4",
    ),
    SourceMedia(
        user_id=user.id,
        file_name="raw-interview.mov",
        status="processing",
        file_url="https://media.clipstudio.dev/uploads/raw-interview.mov",
    ),
]

for item in media:
    db.add(item)

db.commit()

print(f"Seeded user {user.email} with {len(media)} source media records")
for item in media:
    print(f"  {item.id}  {item.status:<10}  {item.file_name}")

db.close()
