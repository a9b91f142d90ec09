import pandas as pd

from fitquest.data_processing.derive_reps import derive_reps_for_video


def _video(frames):
    rows = []
    for i, frame in enumerate(frames):
        row = frame.to_row()
        row.update({"video_name": "clip", "frame_idx": i, "t_s": i / 15.0})
        rows.append(row)
    return pd.DataFrame(rows)


def test_reps_from_recorded_keypoints(pose):
    angles = [170, 130, 90, 95, 140, 170, 165, 90, 170]
    dfv = _video([pose.pushup(a) for a in angles])

    reps, rep_ids = derive_reps_for_video(dfv, "pushup")

    assert [r["rep_id"] for r in reps] == ["r1", "r2"]
    assert [r["frame_idx"] for r in reps] == [5, 8]
    # a rep spans from the frame that went down to the frame that came back up
    assert list(rep_ids) == ["", "", "r1", "r1", "r1", "r1", "", "r2", "r2"]


def test_missing_joints_in_csv_do_not_count(pose):
    df = _video([pose.pushup(90), pose.pushup(170)])
    df["right_wrist_x"] = float("nan")

    reps, rep_ids = derive_reps_for_video(df, "pushup")

    assert reps == []
    assert set(rep_ids) == {""}
