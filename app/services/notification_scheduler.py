# app/services/notification_scheduler.py

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from app.errors import ValidationFailed
from app.schemas.activity_schema import (
    ActivityCreate,
    ActivityType,
    DiaperDetails,
    FeedingDetails,
    MedicineDetails,
    SleepDetails,
)
from config.logging_config import get_logger

logger = get_logger(__name__)

# categoria -> ação disponível na notificação
CATEGORY_ACTIONS = {
    "FEEDING_REMINDER": "FEEDING_DONE",
    "SLEEP_REMINDER": "SLEEP_DONE",
    "DIAPER_REMINDER": "DIAPER_CHANGED",
    "MEDICINE_REMINDER": "MEDICINE_TAKEN",
    "MILESTONE_CHECK": "MILESTONE_CHECKED",
    "SMART_SUGGESTION": "SUGGESTION_VIEWED",
}

# ações que registram uma atividade
LOGGING_ACTIONS = {
    "FEEDING_DONE": ActivityType.feeding,
    "SLEEP_DONE": ActivityType.sleep,
    "DIAPER_CHANGED": ActivityType.diaper,
    "MEDICINE_TAKEN": ActivityType.medicine,
}

NAVIGATION_ACTIONS = {"MILESTONE_CHECKED", "SUGGESTION_VIEWED"}

EXPECTED_MILESTONES = {
    1: ["Levanta a cabeça", "Reage a sons", "Acompanha objetos com os olhos"],
    2: ["Sorriso social", "Faz sons de arrulho", "Sustenta a cabeça por alguns instantes"],
    3: ["Levanta a cabeça a 45 graus de bruços", "Começa a abrir as mãos", "Reage a vozes conhecidas"],
    4: ["Rola", "Agarra brinquedos", "Dá risada"],
    6: ["Senta sem apoio", "Começa a comer sólidos", "Reconhece rostos conhecidos"],
    9: ["Engatinha", "Pega objetos pequenos com os dedos", "Fala palavras simples"],
    12: ["Anda sozinho", "Fala a primeira palavra", "Bebe no copo"],
}


def expected_milestones(age_in_months: int) -> List[str]:
    return list(EXPECTED_MILESTONES.get(age_in_months, []))


@dataclass
class NotificationRequest:
    identifier: str
    category: str
    title: str
    body: str
    trigger: Dict[str, Any]
    user_info: Dict[str, Any] = field(default_factory=dict)
    owner: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


class NotificationCenter:
    """Fila de notificações pendentes, em memória, separada por dono."""

    def __init__(self):
        self._authorized: Set[Optional[str]] = set()
        self._pending: Dict[str, NotificationRequest] = {}
        self._lock = threading.Lock()

    def set_authorization(self, granted: bool, owner: Optional[str] = None) -> None:
        with self._lock:
            if granted:
                self._authorized.add(owner)
            else:
                self._authorized.discard(owner)

    def is_authorized(self, owner: Optional[str] = None) -> bool:
        with self._lock:
            return owner in self._authorized

    def add(self, request: NotificationRequest) -> None:
        # mesmo identificador substitui o pedido anterior
        with self._lock:
            self._pending[request.identifier] = request

    def pending(self, owner: Optional[str] = None) -> List[NotificationRequest]:
        with self._lock:
            return [r for r in self._pending.values() if r.owner == owner]

    def remove(self, identifiers: List[str], owner: Optional[str] = None) -> int:
        with self._lock:
            found = [i for i in identifiers if i in self._pending and self._pending[i].owner == owner]
            for identifier in found:
                del self._pending[identifier]
        return len(found)

    def remove_all(self, owner: Optional[str] = None) -> int:
        with self._lock:
            found = [i for i, r in self._pending.items() if r.owner == owner]
            for identifier in found:
                del self._pending[identifier]
        return len(found)


def interval_trigger(seconds: float, repeats: bool) -> Dict[str, Any]:
    return {"type": "interval", "seconds": seconds, "repeats": repeats}


def calendar_trigger(hour: int, minute: int, repeats: bool, weekday: Optional[int] = None) -> Dict[str, Any]:
    trigger = {"type": "calendar", "hour": hour, "minute": minute, "repeats": repeats}
    if weekday is not None:
        trigger["weekday"] = weekday
    return trigger


class NotificationScheduler:
    """Agenda lembretes por dono (o usuário logado).

    Cada usuário autoriza e vê somente os próprios pedidos; o dono padrão
    None serve para uso local, fora da API.
    """

    def __init__(self, center: Optional[NotificationCenter] = None):
        self.center = center or NotificationCenter()

    def is_enabled(self, owner: Optional[str] = None) -> bool:
        return self.center.is_authorized(owner)

    def request_authorization(self, granted: bool, owner: Optional[str] = None) -> bool:
        self.center.set_authorization(granted, owner)
        logger.info("notification_authorization", granted=granted, owner=owner)
        return granted

    def _schedule(self, request: NotificationRequest) -> Optional[NotificationRequest]:
        if not self.is_enabled(request.owner):
            logger.debug("notification_skipped", identifier=request.identifier, owner=request.owner)
            return None
        self.center.add(request)
        logger.info("notification_scheduled", identifier=request.identifier, category=request.category)
        return request

    # ------------------ lembretes ------------------

    def schedule_feeding_reminder(
        self, baby_id: str, interval_seconds: float, owner: Optional[str] = None
    ) -> Optional[NotificationRequest]:
        return self._schedule(NotificationRequest(
            identifier=f"feeding_reminder_{baby_id}",
            category="FEEDING_REMINDER",
            title="Lembrete de mamada",
            body="Está na hora de alimentar o bebê",
            trigger=interval_trigger(interval_seconds, repeats=True),
            user_info={"baby_id": baby_id},
            owner=owner,
        ))

    def schedule_sleep_reminder(
        self, baby_id: str, hour: int, minute: int, owner: Optional[str] = None
    ) -> Optional[NotificationRequest]:
        return self._schedule(NotificationRequest(
            identifier=f"sleep_reminder_{baby_id}",
            category="SLEEP_REMINDER",
            title="Lembrete de sono",
            body="Hora de preparar o bebê para dormir",
            trigger=calendar_trigger(hour, minute, repeats=True),
            user_info={"baby_id": baby_id},
            owner=owner,
        ))

    def schedule_diaper_reminder(
        self, baby_id: str, interval_seconds: float, owner: Optional[str] = None
    ) -> Optional[NotificationRequest]:
        return self._schedule(NotificationRequest(
            identifier=f"diaper_reminder_{baby_id}",
            category="DIAPER_REMINDER",
            title="Lembrete de fralda",
            body="Verifique a fralda do bebê",
            trigger=interval_trigger(interval_seconds, repeats=True),
            user_info={"baby_id": baby_id},
            owner=owner,
        ))

    def schedule_medicine_reminder(
        self,
        baby_id: str,
        medicine_name: str,
        hour: int,
        minute: int,
        repeat_weekdays: Optional[List[int]] = None,
        owner: Optional[str] = None,
    ) -> List[NotificationRequest]:
        """Um pedido único sem dias de repetição, ou um por dia da semana."""
        if not self.is_enabled(owner):
            return []

        def build(identifier: str, trigger: Dict[str, Any]) -> NotificationRequest:
            return NotificationRequest(
                identifier=identifier,
                category="MEDICINE_REMINDER",
                title="Lembrete de remédio",
                body=f"Hora de dar {medicine_name} ao bebê",
                trigger=trigger,
                user_info={"baby_id": baby_id, "medicine_name": medicine_name},
                owner=owner,
            )

        prefix = f"medicine_{baby_id}_{medicine_name}"
        if not repeat_weekdays:
            requests = [build(f"{prefix}_{uuid.uuid4()}", calendar_trigger(hour, minute, repeats=False))]
        else:
            requests = [
                build(f"{prefix}_day{day}", calendar_trigger(hour, minute, repeats=True, weekday=day))
                for day in sorted(set(repeat_weekdays))
            ]
        return [r for r in map(self._schedule, requests) if r is not None]

    def schedule_milestone_check(
        self, baby_id: str, age_in_months: int, owner: Optional[str] = None
    ) -> List[NotificationRequest]:
        scheduled = []
        for index, milestone in enumerate(expected_milestones(age_in_months)):
            request = self._schedule(NotificationRequest(
                identifier=f"milestone_{baby_id}_{age_in_months}months_{index}",
                category="MILESTONE_CHECK",
                title="Marco de desenvolvimento",
                body=f"O bebê tem {age_in_months} meses, veja se já consegue: {milestone}",
                trigger=interval_trigger(1, repeats=False),
                user_info={"baby_id": baby_id, "milestone": milestone},
                owner=owner,
            ))
            if request is not None:
                scheduled.append(request)
        return scheduled

    def schedule_smart_suggestion(
        self, title: str, body: str, delay_seconds: float = 3600, owner: Optional[str] = None
    ) -> Optional[NotificationRequest]:
        return self._schedule(NotificationRequest(
            identifier=f"smart_suggestion_{uuid.uuid4()}",
            category="SMART_SUGGESTION",
            title=title,
            body=body,
            trigger=interval_trigger(delay_seconds, repeats=False),
            owner=owner,
        ))

    # ------------------ cancelamento ------------------

    def cancel_feeding_reminder(self, baby_id: str, owner: Optional[str] = None) -> int:
        return self.center.remove([f"feeding_reminder_{baby_id}"], owner)

    def cancel_sleep_reminder(self, baby_id: str, owner: Optional[str] = None) -> int:
        return self.center.remove([f"sleep_reminder_{baby_id}"], owner)

    def cancel_diaper_reminder(self, baby_id: str, owner: Optional[str] = None) -> int:
        return self.center.remove([f"diaper_reminder_{baby_id}"], owner)

    def cancel_medicine_reminder(self, baby_id: str, medicine_name: str, owner: Optional[str] = None) -> int:
        prefix = f"medicine_{baby_id}_{medicine_name}_"
        identifiers = [r.identifier for r in self.center.pending(owner) if r.identifier.startswith(prefix)]
        return self.center.remove(identifiers, owner)

    def pending(self, owner: Optional[str] = None) -> List[NotificationRequest]:
        return self.center.pending(owner)

    def remove_all(self, owner: Optional[str] = None) -> int:
        removed = self.center.remove_all(owner)
        logger.info("notifications_cleared", owner=owner, removed=removed)
        return removed

    # ------------------ ações ------------------

    def handle_action(
        self,
        action_identifier: str,
        baby_id: Optional[str],
        activity_store,
        user_id: str,
        medicine_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ):
        """Trata a ação tocada na notificação.

        Ações de registro criam a atividade correspondente e a devolvem;
        ações de navegação não registram nada e devolvem None.
        """
        if action_identifier in NAVIGATION_ACTIONS:
            logger.info("notification_action", action=action_identifier)
            return None

        activity_type = LOGGING_ACTIONS.get(action_identifier)
        if activity_type is None:
            raise ValidationFailed([f"Ação desconhecida: {action_identifier}"])
        if not baby_id:
            raise ValidationFailed(["baby_id é obrigatório para esta ação"])

        details = {
            ActivityType.feeding: lambda: FeedingDetails(),
            ActivityType.sleep: lambda: SleepDetails(),
            ActivityType.diaper: lambda: DiaperDetails(),
            ActivityType.medicine: lambda: MedicineDetails(name=medicine_name or "Remédio"),
        }[activity_type]()

        activity = activity_store.add_activity(
            ActivityCreate(
                baby_id=baby_id,
                type=activity_type,
                start_time=now or datetime.now(),
                details=details,
                notes="Registrado pela notificação",
            ),
            created_by=user_id,
        )
        logger.info("notification_action", action=action_identifier, activity_id=activity.id)
        return activity
