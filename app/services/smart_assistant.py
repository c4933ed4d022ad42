# app/services/smart_assistant.py

import random
import threading
from collections import deque
from dataclasses import dataclass
from datetime import date, datetime
from typing import Deque, Dict, List, Optional

from app.schemas.assistant_schema import (
    AdviceResponse,
    AppContext,
    ParentingTip,
    PredictedEvent,
    RelaxationTechnique,
    ScheduleSuggestion,
    StressLevel,
    SupportMessage,
    UserInteraction,
    UserInteractionType,
)
from app.utils.pattern_learner import BabyPatternLearner
from app.utils.report_generator import activity_suggestions
from config.logging_config import get_logger

logger = get_logger(__name__)

HISTORY_LIMIT = 100
STRESS_WINDOW = 10
HIGH_STRESS_RATIO = 0.6
MEDIUM_STRESS_RATIO = 0.3

STRESS_INDICATORS = {
    UserInteractionType.frequent_logging,
    UserInteractionType.late_night_activity,
    UserInteractionType.multiple_retries,
}


@dataclass
class KnowledgeItem:
    category: str
    question: str
    answer: str
    tags: List[str]


KNOWLEDGE_ITEMS = [
    KnowledgeItem(
        category="feeding",
        question="De quanto em quanto tempo o bebê deve mamar?",
        answer="Recém-nascidos costumam mamar a cada 2 a 3 horas; o intervalo aumenta conforme o bebê cresce.",
        tags=["mamada", "mamar", "recém-nascido", "frequência"],
    ),
    KnowledgeItem(
        category="sleep",
        question="O que fazer quando o sono do bebê é irregular?",
        answer="Crie um ritual fixo antes de dormir, mantenha o ambiente calmo e construa a rotina aos poucos.",
        tags=["sono", "dormir", "rotina"],
    ),
    KnowledgeItem(
        category="development",
        question="Como estimular o desenvolvimento do cérebro do bebê?",
        answer="Converse e cante com o bebê, ofereça estímulos sensoriais variados e brinque junto.",
        tags=["desenvolvimento", "cérebro", "brincar"],
    ),
]

DAILY_TIPS = [
    ParentingTip(
        title="Dica do dia",
        content="O contato visual com o bebê fortalece o vínculo e ajuda no desenvolvimento social.",
        category="development",
    ),
    ParentingTip(
        title="Sinais de fome",
        content="Observe os sinais de fome, como movimentos de sucção e virar a cabeça, e responda logo.",
        category="feeding",
    ),
    ParentingTip(
        title="Ambiente de sono",
        content="Manter o quarto entre 18 e 20°C ajuda o bebê a dormir melhor.",
        category="sleep",
    ),
]

FALLBACK_ANSWER = (
    "Procure um pediatra ou especialista para uma orientação adequada à situação do seu bebê."
)

SUPPORT_MESSAGES = {
    StressLevel.low: [
        "Você está indo muito bem! Continue nesse ritmo.",
        "O bebê está crescendo saudável com o seu cuidado.",
        "Lembre-se de cuidar de você também!",
    ],
    StressLevel.medium: [
        "Cuidar de um bebê não é fácil e você está se esforçando muito.",
        "Descanse quando puder, cuidar de si também é cuidar do bebê.",
        "Se estiver cansado, peça ajuda a familiares e amigos.",
    ],
    StressLevel.high: [
        "Os desafios são muitos, mas você não está sozinho.",
        "Sentir estresse é normal, procure apoio e ajuda.",
        "Conversar com profissionais ou outros pais pode ajudar bastante.",
    ],
}

RELAXATION_TECHNIQUES = [
    RelaxationTechnique(
        name="Respiração profunda",
        description="Inspire por 4 segundos, segure por 4 e expire devagar por 4. Repita de 5 a 10 vezes.",
        duration=300,
        category="breathing",
    ),
    RelaxationTechnique(
        name="Relaxamento muscular progressivo",
        description="Comece pelos pés, contraia e relaxe cada grupo muscular do corpo.",
        duration=600,
        category="muscle_relaxation",
    ),
    RelaxationTechnique(
        name="Meditação mindfulness",
        description="Concentre-se no momento presente, observe a respiração e as sensações sem julgar.",
        duration=900,
        category="mindfulness",
    ),
]


class ParentingKnowledgeBase:
    def __init__(self, items: Optional[List[KnowledgeItem]] = None, tips: Optional[List[ParentingTip]] = None):
        self.items = items if items is not None else KNOWLEDGE_ITEMS
        self.tips = tips if tips is not None else DAILY_TIPS

    def get_advice(self, query: str) -> AdviceResponse:
        needle = query.strip().lower()
        for item in self.items:
            tag_match = any(tag in needle for tag in item.tags)
            if tag_match or (needle and needle in item.question.lower()):
                return AdviceResponse(
                    question=query,
                    answer=item.answer,
                    category=item.category,
                    confidence=0.8,
                    sources=["Base de conhecimento"],
                )

        return AdviceResponse(
            question=query,
            answer=FALLBACK_ANSWER,
            category="general",
            confidence=0.5,
            sources=["Orientação geral"],
        )

    def daily_tips(self) -> List[ParentingTip]:
        return list(self.tips)

    def contextual_tips(self, context: AppContext) -> List[ParentingTip]:
        if context == AppContext.feeding_log:
            return [tip for tip in self.tips if tip.category == "feeding"]
        if context == AppContext.sleep_log:
            return [tip for tip in self.tips if tip.category == "sleep"]
        return self.tips[:2]


class EmotionSupporter:
    """Estima o nível de estresse dos pais a partir das interações recentes."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._history: Deque[UserInteraction] = deque(maxlen=HISTORY_LIMIT)
        self._rng = rng or random.Random()
        self._lock = threading.Lock()

    def record_interaction(self, interaction: UserInteraction) -> None:
        if interaction.timestamp is None:
            interaction = interaction.model_copy(update={"timestamp": datetime.now()})
        with self._lock:
            self._history.append(interaction)

    def history(self) -> List[UserInteraction]:
        with self._lock:
            return list(self._history)

    def detect_stress_level(self) -> StressLevel:
        recent = self.history()[-STRESS_WINDOW:]
        if not recent:
            return StressLevel.low

        indicators = sum(1 for interaction in recent if interaction.type in STRESS_INDICATORS)
        ratio = indicators / len(recent)
        if ratio > HIGH_STRESS_RATIO:
            return StressLevel.high
        if ratio > MEDIUM_STRESS_RATIO:
            return StressLevel.medium
        return StressLevel.low

    def support_message(self, level: Optional[StressLevel] = None) -> SupportMessage:
        level = level or self.detect_stress_level()
        return SupportMessage(
            text=self._rng.choice(SUPPORT_MESSAGES[level]),
            level=level,
            timestamp=datetime.now(),
        )

    def relaxation_technique(self) -> RelaxationTechnique:
        return self._rng.choice(RELAXATION_TECHNIQUES)


class SmartAssistant:
    def __init__(
        self,
        pattern_learner: BabyPatternLearner,
        knowledge_base: Optional[ParentingKnowledgeBase] = None,
        emotion_supporter: Optional[EmotionSupporter] = None,
    ):
        self.pattern_learner = pattern_learner
        self.knowledge_base = knowledge_base or ParentingKnowledgeBase()
        self.emotion_supporter = emotion_supporter or EmotionSupporter()

    def learn(self, baby_id: str, activities) -> None:
        self.pattern_learner.learn_patterns(baby_id, activities)

    def ensure_learned(self, baby_id: str, load_activities) -> None:
        """Aprende sob demanda; `load_activities` só é chamado sem padrão em cache."""
        if self.pattern_learner.get_pattern(baby_id) is None:
            activities = load_activities()
            if activities:
                self.learn(baby_id, activities)

    def schedule(self, baby_id: str, day: Optional[date] = None) -> List[ScheduleSuggestion]:
        return [
            ScheduleSuggestion(
                type=s.type,
                suggested_time=s.suggested_time,
                confidence=s.confidence,
                reason=s.reason,
            )
            for s in self.pattern_learner.generate_daily_schedule(baby_id, day)
        ]

    def next_event(self, baby_id: str, now: Optional[datetime] = None) -> Optional[PredictedEvent]:
        prediction = self.pattern_learner.get_next_predicted_event(baby_id, now)
        if prediction is None:
            return None
        return PredictedEvent(
            type=prediction.type,
            predicted_time=prediction.predicted_time,
            confidence=prediction.confidence,
        )

    def advice(self, query: str) -> AdviceResponse:
        response = self.knowledge_base.get_advice(query)
        logger.info("advice_requested", category=response.category, confidence=response.confidence)
        return response

    def daily_tips(self) -> List[ParentingTip]:
        return self.knowledge_base.daily_tips()

    def contextual_tips(self, context: AppContext) -> List[ParentingTip]:
        return self.knowledge_base.contextual_tips(context)

    def record_interaction(self, interaction: UserInteraction) -> StressLevel:
        self.emotion_supporter.record_interaction(interaction)
        return self.emotion_supporter.detect_stress_level()

    def stress_level(self) -> StressLevel:
        return self.emotion_supporter.detect_stress_level()

    def support_message(self) -> SupportMessage:
        return self.emotion_supporter.support_message()

    def relaxation_technique(self) -> RelaxationTechnique:
        return self.emotion_supporter.relaxation_technique()

    @staticmethod
    def activity_suggestions(last_by_type: Dict[str, Optional[datetime]], now: Optional[datetime] = None) -> List[str]:
        return activity_suggestions(last_by_type, now)
