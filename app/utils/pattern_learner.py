# app/utils/pattern_learner.py

import threading
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

from config.logging_config import get_logger

logger = get_logger(__name__)

# valores dentro de 1h (após ordenação) caem no mesmo grupo
CLUSTER_THRESHOLD_MINUTES = 60
MAX_VARIANCE = 3600.0
MIN_CONFIDENCE = 0.1
DIAPER_CONFIDENCE = 0.7


@dataclass
class SleepPattern:
    typical_sleep_times: List[int]  # minutos desde a meia-noite
    average_duration: float  # segundos
    confidence: float


@dataclass
class FeedingPattern:
    typical_feeding_times: List[int]
    average_interval: float  # segundos
    confidence: float


@dataclass
class DiaperPattern:
    average_interval: float
    confidence: float


@dataclass
class BabyPattern:
    sleep_pattern: Optional[SleepPattern] = None
    feeding_pattern: Optional[FeedingPattern] = None
    diaper_pattern: Optional[DiaperPattern] = None
    learned_at: datetime = field(default_factory=datetime.now)


@dataclass
class Suggestion:
    type: str
    suggested_time: datetime
    confidence: float
    reason: str


@dataclass
class Prediction:
    type: str
    predicted_time: datetime
    confidence: float


def minutes_since_midnight(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def cluster_times(times: Iterable[int]) -> List[int]:
    """Agrupa horários próximos e devolve a média (truncada) de cada grupo.

    Ex.: [420, 435, 900] -> [427, 900]
    """
    sorted_times = sorted(times)
    if not sorted_times:
        return []

    clusters: List[List[int]] = []
    current = [sorted_times[0]]
    for previous, value in zip(sorted_times, sorted_times[1:]):
        if value - previous <= CLUSTER_THRESHOLD_MINUTES:
            current.append(value)
        else:
            clusters.append(current)
            current = [value]
    clusters.append(current)

    return [sum(cluster) // len(cluster) for cluster in clusters]


def calculate_variance(values: List[int]) -> float:
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def calculate_confidence(times: List[int]) -> float:
    # histórico curto demais para medir consistência
    if len(times) <= 2:
        return 0.5
    variance = calculate_variance(times)
    return max(MIN_CONFIDENCE, 1.0 - variance / MAX_VARIANCE)


def average_duration(activities) -> float:
    durations = [a.duration for a in activities if a.duration]
    if not durations:
        return 0.0
    return sum(durations) / len(durations)


def average_interval(activities) -> float:
    if len(activities) < 2:
        return 0.0
    ordered = sorted(activities, key=lambda a: a.start_time)
    intervals = [
        (current.start_time - previous.start_time).total_seconds()
        for previous, current in zip(ordered, ordered[1:])
    ]
    return sum(intervals) / len(intervals)


def default_schedule(day: date) -> List[Suggestion]:
    """Rotina padrão usada quando ainda não há histórico."""
    start_of_day = datetime.combine(day, time.min)
    return [
        Suggestion("feeding", start_of_day + timedelta(hours=7), 0.8, "Horário sugerido para a primeira mamada"),
        Suggestion("sleep", start_of_day + timedelta(hours=9), 0.7, "Horário sugerido para a soneca da manhã"),
        Suggestion("feeding", start_of_day + timedelta(hours=12), 0.8, "Horário sugerido para a mamada do almoço"),
    ]


class BabyPatternLearner:
    """Aprende horários típicos de sono e mamada de cada bebê."""

    def __init__(self):
        self._patterns: Dict[str, BabyPattern] = {}
        self._lock = threading.Lock()

    def learn_patterns(self, baby_id: str, activities) -> BabyPattern:
        by_type: Dict[str, list] = {"sleep": [], "feeding": [], "diaper": []}
        for activity in activities:
            if activity.type in by_type:
                by_type[activity.type].append(activity)

        pattern = BabyPattern(
            sleep_pattern=self._analyze_sleep(by_type["sleep"]),
            feeding_pattern=self._analyze_feeding(by_type["feeding"]),
            diaper_pattern=self._analyze_diaper(by_type["diaper"]),
        )
        with self._lock:
            self._patterns[baby_id] = pattern

        logger.info(
            "patterns_learned",
            baby_id=baby_id,
            sleep_samples=len(by_type["sleep"]),
            feeding_samples=len(by_type["feeding"]),
            diaper_samples=len(by_type["diaper"]),
        )
        return pattern

    def get_pattern(self, baby_id: str) -> Optional[BabyPattern]:
        with self._lock:
            return self._patterns.get(baby_id)

    def forget(self, baby_id: str) -> None:
        with self._lock:
            self._patterns.pop(baby_id, None)

    def on_activity_changed(self, topic: str, payload: dict) -> None:
        baby_id = payload.get("baby_id")
        if baby_id:
            self.forget(baby_id)

    def generate_daily_schedule(self, baby_id: str, day: Optional[date] = None) -> List[Suggestion]:
        day = day or date.today()
        pattern = self.get_pattern(baby_id)
        if pattern is None:
            return default_schedule(day)

        start_of_day = datetime.combine(day, time.min)
        suggestions: List[Suggestion] = []

        if pattern.sleep_pattern:
            for minutes in pattern.sleep_pattern.typical_sleep_times:
                suggestions.append(Suggestion(
                    "sleep",
                    start_of_day + timedelta(minutes=minutes),
                    pattern.sleep_pattern.confidence,
                    "Baseado no histórico de sono",
                ))

        if pattern.feeding_pattern:
            for minutes in pattern.feeding_pattern.typical_feeding_times:
                suggestions.append(Suggestion(
                    "feeding",
                    start_of_day + timedelta(minutes=minutes),
                    pattern.feeding_pattern.confidence,
                    "Baseado no histórico de mamadas",
                ))

        return sorted(suggestions, key=lambda s: s.suggested_time)

    def get_next_predicted_event(self, baby_id: str, now: Optional[datetime] = None) -> Optional[Prediction]:
        """Próximo horário típico ainda hoje.

        Não passa para o dia seguinte: depois do último horário do dia
        devolve None.
        """
        pattern = self.get_pattern(baby_id)
        if pattern is None:
            return None

        now = now or datetime.now()
        current_minutes = minutes_since_midnight(now)

        candidates = []
        if pattern.sleep_pattern:
            for minutes in pattern.sleep_pattern.typical_sleep_times:
                if minutes > current_minutes:
                    candidates.append(("sleep", minutes, pattern.sleep_pattern.confidence))
        if pattern.feeding_pattern:
            for minutes in pattern.feeding_pattern.typical_feeding_times:
                if minutes > current_minutes:
                    candidates.append(("feeding", minutes, pattern.feeding_pattern.confidence))

        if not candidates:
            return None

        # min() mantém o primeiro em caso de empate: sono antes de mamada
        event_type, minutes, confidence = min(candidates, key=lambda c: c[1])
        start_of_day = datetime.combine(now.date(), time.min)
        return Prediction(event_type, start_of_day + timedelta(minutes=minutes), confidence)

    # ------------------ análise por tipo ------------------

    def _analyze_sleep(self, activities) -> Optional[SleepPattern]:
        if not activities:
            return None
        times = [minutes_since_midnight(a.start_time) for a in activities]
        return SleepPattern(
            typical_sleep_times=cluster_times(times),
            average_duration=average_duration(activities),
            confidence=calculate_confidence(times),
        )

    def _analyze_feeding(self, activities) -> Optional[FeedingPattern]:
        if not activities:
            return None
        times = [minutes_since_midnight(a.start_time) for a in activities]
        return FeedingPattern(
            typical_feeding_times=cluster_times(times),
            average_interval=average_interval(activities),
            confidence=calculate_confidence(times),
        )

    def _analyze_diaper(self, activities) -> Optional[DiaperPattern]:
        if not activities:
            return None
        # trocas de fralda são pouco regulares
        return DiaperPattern(average_interval=average_interval(activities), confidence=DIAPER_CONFIDENCE)
