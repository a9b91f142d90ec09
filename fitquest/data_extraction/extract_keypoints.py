"""
Run MediaPipe Pose over the videos of one exercise and write a wide keypoint CSV
(one row per sampled frame, <joint>_x/_y/_conf columns) for offline replay.

Usage:
  python -m fitquest.data_extraction.extract_keypoints --exercise squat --fps 15 --verbose
"""
import argparse
import logging
from pathlib import Path
from typing import Iterator, List, Tuple

import cv2
import numpy as np
import pandas as pd

from fitquest.common import config
from fitquest.common.io_utils import write_csv
from fitquest.common.keypoints import KEYPOINT_COLUMNS
from fitquest.common.paths import VIDEOS_DIR, get_raw_keypoints
from fitquest.common.rules import exercise_names
from fitquest.data_extraction.mediapipe_runner import PoseRunner

logger = logging.getLogger(__name__)

BASE_COLUMNS = ["video_name", "frame_idx", "t_s"]
VIDEO_SUFFIXES = {".mp4", ".mov", ".avi", ".mkv"}


def parse_args():
    p = argparse.ArgumentParser(description="Extract per-frame keypoints into CSV.",
                                formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    p.add_argument("--exercise", type=str, required=True, choices=exercise_names())
    p.add_argument("--fps", type=int, default=config.FPS_TARGET, help="Sampling rate")
    p.add_argument("--overwrite", action="store_true", help="Replace the CSV instead of appending")
    p.add_argument("--verbose", action="store_true")
    return p.parse_args()


def find_videos(exercise: str) -> List[Path]:
    folder = VIDEOS_DIR / exercise
    if not folder.is_dir():
        raise SystemExit(f"[ERROR] Video folder not found: {folder}")
    return sorted(p for p in folder.iterdir() if p.suffix.lower() in VIDEO_SUFFIXES)


def sample_frames(video_path: Path, fps_target: int) -> Iterator[Tuple[int, float, np.ndarray]]:
    """Yield (kept_index, t_s, frame) at roughly fps_target."""
    cap = cv2.VideoCapture(str(video_path))
    try:
        native = cap.get(cv2.CAP_PROP_FPS)
        native = native if native and native > 0 else 30.0
        stride = max(1, round(native / max(1, fps_target)))
        read_idx, kept = 0, 0
        while True:
            ok, frame = cap.read()
            if not ok:
                return
            if read_idx % stride == 0:
                yield kept, read_idx / native, frame
                kept += 1
            read_idx += 1
    finally:
        cap.release()


def video_keypoints(video_path: Path, pose: PoseRunner, fps_target: int) -> pd.DataFrame:
    rows = []
    for frame_idx, t_s, frame in sample_frames(video_path, fps_target):
        kp = pose.process_bgr(frame, timestamp=t_s)
        if kp is None:
            continue  # nobody in frame
        rows.append({"video_name": video_path.name, "frame_idx": frame_idx, "t_s": t_s, **kp.to_row()})
    return pd.DataFrame(rows, columns=BASE_COLUMNS + KEYPOINT_COLUMNS)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args()
    out_csv = get_raw_keypoints(args.exercise)
    if args.overwrite and out_csv.exists():
        out_csv.unlink()

    total = 0
    with PoseRunner() as pose:
        for video in find_videos(args.exercise):
            df = video_keypoints(video, pose, args.fps)
            if args.verbose:
                print(f"[INFO] {video.name}: frames with a pose = {len(df)}")
            if df.empty:
                logger.warning("no pose detected in %s", video.name)
                continue
            write_csv(df, out_csv, mode="a")
            total += len(df)

    print(f"[SUCCESS] Keypoints written: {out_csv} (rows={total})")


if __name__ == "__main__":
    main()
