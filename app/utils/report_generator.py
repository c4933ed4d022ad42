# app/utils/report_generator.py

from collections import Counter, defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

# limiares das sugestões (segundos)
FEEDING_GAP_SECONDS = 3 * 3600
DIAPER_GAP_SECONDS = 2 * 3600
AWAKE_GAP_SECONDS = 4 * 3600

# referências das tendências simples
EXPECTED_DAILY_FEEDS = 8
EXPECTED_DAILY_SLEEP_SECONDS = 8 * 3600


def activity_seconds(activity) -> float:
    if activity.duration:
        return float(activity.duration)
    if activity.end_time and activity.start_time:
        return max(0.0, (activity.end_time - activity.start_time).total_seconds())
    return 0.0


def generate_daily_summary(activities: Iterable, day: date) -> Dict:
    """Resumo de um dia a partir das atividades que começaram nele."""
    day_start = datetime.combine(day, datetime.min.time())
    day_end = day_start + timedelta(days=1)

    day_activities = sorted(
        (a for a in activities if day_start <= a.start_time < day_end),
        key=lambda a: a.start_time,
    )

    total_sleep = 0.0
    longest_nap = 0.0
    counts: Counter = Counter()

    for activity in day_activities:
        counts[activity.type] += 1
        if activity.type == "sleep":
            seconds = activity_seconds(activity)
            total_sleep += seconds
            longest_nap = max(longest_nap, seconds)

    return {
        "total_sleep_minutes": int(total_sleep / 60),
        "total_feeds": counts.get("feeding", 0),
        "longest_nap_minutes": int(longest_nap / 60),
        "activity_counts": dict(counts),
    }


def report_notes(summary: Dict) -> str:
    return (
        f"Total de sono hoje: {summary['total_sleep_minutes']} minutos. "
        f"Maior soneca: {summary['longest_nap_minutes']} minutos. "
        f"Total de mamadas: {summary['total_feeds']}."
    )


def generate_statistics(activities: Iterable, period: str) -> Dict:
    """Contagens, durações e tendências para 'day' ou 'week'."""
    days = 1 if period == "day" else 7

    counts: Counter = Counter()
    total_duration: Dict[str, float] = defaultdict(float)

    for activity in activities:
        counts[activity.type] += 1
        seconds = activity_seconds(activity)
        if seconds:
            total_duration[activity.type] += seconds

    averages: Dict[str, float] = {}
    for activity_type, count in counts.items():
        if activity_type in total_duration:
            averages[f"{activity_type}_average_duration"] = total_duration[activity_type] / count
        averages[f"{activity_type}_daily_count"] = count / days

    feeding_count = counts.get("feeding", 0)
    sleep_seconds = total_duration.get("sleep", 0.0)

    trends = {
        "feeding_trend": {
            "direction": "up" if feeding_count > 6 else "stable",
            "percentage": feeding_count / EXPECTED_DAILY_FEEDS * 100,
            "description": "Frequência de mamadas",
        },
        "sleep_trend": {
            "direction": "up" if sleep_seconds > EXPECTED_DAILY_SLEEP_SECONDS else "down",
            "percentage": sleep_seconds / EXPECTED_DAILY_SLEEP_SECONDS * 100,
            "description": "Tempo de sono",
        },
    }

    return {
        "activity_counts": dict(counts),
        "total_duration": dict(total_duration),
        "averages": averages,
        "trends": trends,
    }


def activity_suggestions(last_by_type: Dict[str, Optional[datetime]], now: Optional[datetime] = None) -> List[str]:
    """Lembretes simples a partir do horário da última atividade de cada tipo."""
    now = now or datetime.now()
    suggestions = []

    def elapsed(activity_type: str) -> Optional[float]:
        last = last_by_type.get(activity_type)
        return (now - last).total_seconds() if last else None

    since_feeding = elapsed("feeding")
    if since_feeding is not None and since_feeding > FEEDING_GAP_SECONDS:
        suggestions.append("Já se passaram mais de 3 horas desde a última mamada, talvez seja hora de alimentar.")

    since_diaper = elapsed("diaper")
    if since_diaper is not None and since_diaper > DIAPER_GAP_SECONDS:
        suggestions.append("Já se passaram mais de 2 horas desde a última troca, verifique a fralda.")

    since_sleep = elapsed("sleep")
    if since_sleep is not None and since_sleep > AWAKE_GAP_SECONDS:
        suggestions.append("O bebê está acordado há mais de 4 horas, pode precisar descansar.")

    return suggestions
