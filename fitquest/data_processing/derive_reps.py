#derive_reps.py
"""
Replay recorded keypoints through the RepStateMachine and write:
  - outputs/cleaned/<exercise>/<exercise>_reps.csv
  - outputs/cleaned/<exercise>/<exercise>_frames.csv with rep_id filled

Usage:
  python -m fitquest.data_processing.derive_reps --exercise pushup --verbose
  # optional input override
  python -m fitquest.data_processing.derive_reps --exercise situp --input my_keypoints.csv
"""

import argparse
import logging
from pathlib import Path

import numpy as np
import pandas as pd

from fitquest.common.fsm import ExercisePhase, RepStateMachine
from fitquest.common.io_utils import read_csv, write_csv
from fitquest.common.keypoints import KeypointFrame
from fitquest.common.paths import get_cleaned_frames, get_cleaned_reps, get_raw_keypoints
from fitquest.common.rules import exercise_names, parse_exercise

REP_COLUMNS = ["video_name", "rep_id", "frame_idx", "t_s", "angle"]


def parse_args():
    p = argparse.ArgumentParser(
        description="Replay keypoint CSV through the rep counter; write reps.csv and fill rep_id into frames",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    p.add_argument("--exercise", type=str, required=True, choices=exercise_names())
    p.add_argument("--input", type=Path, default=None, help="Keypoint CSV (defaults to outputs/raw/<exercise>_keypoints.csv)")
    p.add_argument("--verbose", action="store_true")
    return p.parse_args()


def load_frames(exercise: str, path: Path = None):
    frames_csv = path or get_raw_keypoints(exercise)
    if not frames_csv.exists():
        raise SystemExit(f"[ERROR] Keypoint CSV not found: {frames_csv}")
    return read_csv(frames_csv), frames_csv


def derive_reps_for_video(dfv: pd.DataFrame, exercise: str):
    """
    Returns:
      reps: list of dicts with rep info
      rep_ids: array aligned with dfv rows (r1, r2...), empty for frames outside a rep
    """
    machine = RepStateMachine(exercise)
    reps = []
    rep_ids = np.array([""] * len(dfv), dtype=object)
    start_i = None

    for i, row in enumerate(dfv.to_dict("records")):
        res = machine.tick(KeypointFrame.from_row(row))
        if res.rep_completed:
            rid = f"r{res.new_count}"
            first = start_i if start_i is not None else i
            rep_ids[first:i + 1] = rid
            reps.append({
                "rep_id": rid,
                "frame_idx": int(row.get("frame_idx", i)),
                "t_s": float(row.get("t_s", np.nan)),
                "angle": float(res.angle) if res.angle is not None else np.nan,
            })
            start_i = None
        elif res.transitioned and res.phase == ExercisePhase.DOWN:
            start_i = i

    return reps, rep_ids


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args()
    exercise = parse_exercise(args.exercise).value

    frames_df, frames_path = load_frames(exercise, args.input)

    print("======== Derive Reps Config ========")
    print(f"exercise       : {exercise}")
    print(f"keypoints.csv  : {frames_path}")
    print("====================================")

    if "video_name" not in frames_df.columns:
        frames_df["video_name"] = frames_path.stem
    sort_cols = [c for c in ("video_name", "t_s", "frame_idx") if c in frames_df.columns]
    frames_df = frames_df.sort_values(by=sort_cols).reset_index(drop=True)

    all_reps = []
    rep_id_column = np.array([""] * len(frames_df), dtype=object)

    for vid, dfv in frames_df.groupby("video_name", sort=False):
        reps, rep_ids = derive_reps_for_video(dfv, exercise)
        for r in reps:
            all_reps.append({"video_name": vid, **r})
        rep_id_column[dfv.index.to_numpy()] = rep_ids
        if args.verbose:
            print(f"[INFO] {vid}: reps found = {len(reps)}")

    reps_df = pd.DataFrame(all_reps, columns=REP_COLUMNS)
    reps_out = get_cleaned_reps(exercise)
    write_csv(reps_df, reps_out, mode="w", header=True)
    print(f"[SUCCESS] Reps written: {reps_out} (rows={len(reps_df)})")

    frames_df["rep_id"] = rep_id_column
    frames_out = get_cleaned_frames(exercise)
    write_csv(frames_df, frames_out, mode="w", header=True)
    print(f"[SUCCESS] Frames written with rep_id: {frames_out} (rows={len(frames_df)})")


if __name__ == "__main__":
    main()
