import pandas as pd

from models import Milestone

SUMMARY_COLUMNS = ["section_id", "section_name", "task_count", "person_days", "progress"]


def tasks_frame(schedule):
    """One row per task with the fields the section summary aggregates."""
    rows = []
    for task in schedule.tasks:
        is_milestone = isinstance(task, Milestone)
        rows.append({
            "task_id": task.task_id,
            "section_id": task.section_id,
            "status": task.status.value,
            "is_milestone": is_milestone,
            "person_days": 0 if is_milestone else task.person_days,
            "completed_person_days": 0.0 if is_milestone else task.person_days * task.progress / 100,
        })
    return pd.DataFrame(rows, columns=["task_id", "section_id", "status", "is_milestone",
                                       "person_days", "completed_person_days"])


def section_summary(schedule):
    """
    Per-section task count, person days of non-milestone tasks and the
    person-day weighted progress (%), in section order. Tasks pointing at a
    removed section are not reported.
    """
    tasks = tasks_frame(schedule)
    sections = pd.DataFrame(
        [{"section_id": s.section_id, "section_name": s.section_name} for s in schedule.sections],
        columns=["section_id", "section_name"],
    )
    if sections.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    counts = tasks.groupby("section_id").size().rename("task_count")
    dated = tasks[tasks["status"] != "milestone"]
    totals = dated.groupby("section_id")[["person_days", "completed_person_days"]].sum()

    summary = sections.join(counts, on="section_id").join(totals, on="section_id")
    summary[["task_count", "person_days", "completed_person_days"]] = (
        summary[["task_count", "person_days", "completed_person_days"]].fillna(0)
    )
    summary["task_count"] = summary["task_count"].astype(int)
    summary["person_days"] = summary["person_days"].astype(int)
    summary["completed_person_days"] = summary["completed_person_days"].astype(float)

    completed = summary["completed_person_days"]
    total = summary["person_days"]
    summary["progress"] = (completed / total.where(total > 0) * 100).round(2).fillna(0.0)
    return summary[SUMMARY_COLUMNS].reset_index(drop=True)
