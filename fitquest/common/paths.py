from pathlib import Path

from fitquest.common.config import BASE_DIR, DATA_DIR

# مسارات عامة
VIDEOS_DIR  = BASE_DIR / "videos"
OUTPUTS_DIR = DATA_DIR
RAW_DIR     = OUTPUTS_DIR / "raw"
CLEANED_DIR = OUTPUTS_DIR / "cleaned"
STORE_DIR   = OUTPUTS_DIR / "store"

# دوال مساعدة مبنية على اسم التمرين (exercise)
def get_raw_keypoints(exercise: str) -> Path:
    return RAW_DIR / f"{exercise}_keypoints.csv"

def get_cleaned_reps(exercise: str) -> Path:
    return CLEANED_DIR / exercise / f"{exercise}_reps.csv"

def get_cleaned_frames(exercise: str) -> Path:
    return CLEANED_DIR / exercise / f"{exercise}_frames.csv"

def get_user_store(root: Path, user_id) -> Path:
    """Return the JSON document path used by the file gateway for one user."""
    return Path(root) / f"user_{user_id}.json"
