# ecovoice/voice.py
"""Keyword-driven voice command interpreter and the listening session around it.

Rules are tried in order and the first match wins: transport, then energy,
then food. Speech recognition and synthesis are collaborators supplied by the
caller (the browser in production, fakes in tests).
"""
import logging
import re
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Protocol, Tuple

from . import estimator
from .config import VOICE_LANG
from .errors import EcoVoiceError, RecognitionError
from .factors import VOICE_MEAL_CO2
from .schemas import ActivityRecord, Category, Notice

logger = logging.getLogger(__name__)

DEFAULT_DISTANCE_KM = 10
DEFAULT_ENERGY_HOURS = 5

CLARIFICATION = (
    "I didn't quite catch that activity. Try saying something like "
    "'I drove 15 kilometers' or 'I used electricity for 3 hours'."
)

EXAMPLE_PHRASES = (
    "I drove 25 kilometers today",
    "I used electricity for 4 hours",
    "I ate a meat meal for lunch",
    "I had a vegetarian dinner",
    "I took public transport 10 kilometers",
    "I recycled 2 kg of waste",
)


@dataclass(frozen=True)
class VoiceRule:
    category: Category
    keywords: Tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(k in text for k in self.keywords)


# precedence is the tuple order
VOICE_RULES = (
    VoiceRule(Category.transport, ("drove", "car", "drive")),
    VoiceRule(Category.energy, ("electricity", "power", "energy")),
    VoiceRule(Category.food, ("ate", "food", "meal")),
)


@dataclass(frozen=True)
class VoiceOutcome:
    record: Optional[ActivityRecord]
    response: str


def extract_number(text: str) -> Optional[int]:
    m = re.search(r"\d+", text)
    return int(m.group()) if m else None


def match_rule(text: str) -> Optional[VoiceRule]:
    for rule in VOICE_RULES:
        if rule.matches(text):
            return rule
    return None


def _transport(text, now):
    distance = extract_number(text)
    # a spoken 0 is kept; the default only fills in a missing number
    if distance is None:
        distance = DEFAULT_DISTANCE_KM
    co2 = estimator.calc_transport("car", distance, "petrol")
    record = ActivityRecord(
        category=Category.transport, subtype="car", quantity=distance, secondary_key="petrol",
        co2_kg=co2, timestamp=now, source="voice",
    )
    response = (
        f"Got it! I logged {distance} km of car travel. That's about {co2:.1f} kg of CO₂. "
        "Next time, consider carpooling or public transport to reduce emissions!"
    )
    return record, response


def _energy(text, now):
    hours = extract_number(text)
    # as for distance, 0 hours is a real answer
    if hours is None:
        hours = DEFAULT_ENERGY_HOURS
    co2 = estimator.calc_energy(hours, "electricity")
    record = ActivityRecord(
        category=Category.energy, subtype="electricity", quantity=hours,
        co2_kg=co2, timestamp=now, source="voice",
    )
    response = (
        f"I've recorded {hours} hours of electricity usage, producing {co2:.1f} kg CO₂. "
        "Great job tracking your energy! Try switching to LED bulbs to save more."
    )
    return record, response


def _food(text, now):
    # fixed per-meal values, not the food factor table
    if "meat" in text:
        meal = "meat"
    elif "vegetarian" in text:
        meal = "vegetarian"
    else:
        meal = "mixed"
    co2 = VOICE_MEAL_CO2[meal]
    record = ActivityRecord(
        category=Category.food, subtype=meal, quantity=1, co2_kg=co2, timestamp=now, source="voice",
    )
    if meal == "meat":
        tip = "Consider trying plant-based meals to reduce your food footprint!"
    else:
        tip = "Great choice with the plant-based option!"
    return record, f"Meal logged! That contributed {co2} kg CO₂. {tip}"


_HANDLERS = {
    Category.transport: _transport,
    Category.energy: _energy,
    Category.food: _food,
}


def interpret(text: str, now: Optional[datetime] = None) -> VoiceOutcome:
    """Turn a final transcript into an activity guess and a spoken reply."""
    lowered = text.lower()
    rule = match_rule(lowered)
    if rule is None:
        logger.info("no voice rule matched %r", text)
        return VoiceOutcome(record=None, response=CLARIFICATION)
    record, response = _HANDLERS[rule.category](lowered, now or datetime.now().astimezone())
    logger.info("voice command %r -> %s %.3f kg", text, rule.category.value, record.co2_kg)
    return VoiceOutcome(record=record, response=response)


# -----------------
# Speech collaborators
# -----------------
@dataclass(frozen=True)
class RecognitionSettings:
    continuous: bool = False
    interim_results: bool = True
    lang: str = VOICE_LANG


@dataclass(frozen=True)
class Utterance:
    text: str
    rate: float = 0.9
    pitch: float = 1.0
    volume: float = 0.8


class SpeechRecognizer(Protocol):
    def start(self, settings: RecognitionSettings) -> None: ...

    def stop(self) -> None: ...


class SpeechSynthesizer(Protocol):
    def speak(self, utterance: Utterance) -> Future: ...

    def cancel(self) -> None: ...


class VoiceState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


@dataclass
class VoiceAssistant:
    """Listening session: Idle <-> Listening, driven by user toggles and recognizer events.

    The recognizer reports back through handle_result, handle_error and
    handle_end. Interim results only refresh ``transcript``; a final result is
    interpreted, any activity goes to ``on_activity`` and the reply is spoken.
    """

    recognizer: Optional[SpeechRecognizer] = None
    synthesizer: Optional[SpeechSynthesizer] = None
    on_activity: Callable[[ActivityRecord], object] = lambda record: None
    on_notice: Callable[[Notice], object] = lambda notice: None
    settings: RecognitionSettings = field(default_factory=RecognitionSettings)

    state: VoiceState = VoiceState.IDLE
    transcript: str = ""
    response: str = ""
    is_processing: bool = False
    is_speaking: bool = False
    _speech: Optional[Future] = field(default=None, repr=False)

    @property
    def is_listening(self):
        return self.state is VoiceState.LISTENING

    def toggle(self):
        if self.is_listening:
            self.stop()
        else:
            self.start()
        return self.state

    def start(self):
        if self.recognizer is None:
            self.on_notice(Notice(
                title="Voice Recognition Not Supported",
                description="Your browser doesn't support speech recognition.",
                variant="destructive",
            ))
            return
        self.recognizer.start(self.settings)
        self.state = VoiceState.LISTENING
        self.transcript = ""
        self.response = ""

    def stop(self):
        if self.recognizer is not None:
            self.recognizer.stop()
        self.state = VoiceState.IDLE

    def handle_result(self, transcript: str, is_final: bool):
        self.transcript = transcript
        if is_final:
            return self.process(transcript)
        return None

    def handle_error(self, error):
        logger.warning("speech recognition error: %s", error)
        self.state = VoiceState.IDLE
        self.on_notice(RecognitionError("Could not understand speech. Please try again.").notice)

    def handle_end(self):
        self.state = VoiceState.IDLE

    def process(self, text: str) -> VoiceOutcome:
        self.is_processing = True
        try:
            outcome = interpret(text)
            if outcome.record is not None:
                try:
                    self.on_activity(outcome.record)
                except EcoVoiceError as exc:
                    self.on_notice(exc.notice)
                else:
                    self.on_notice(Notice(
                        title="Activity Logged!",
                        description=f"{outcome.record.category.value} activity added to your tracker.",
                    ))
            self.response = outcome.response
            self.transcript = ""
        finally:
            self.is_processing = False
        self.speak(outcome.response)
        return outcome

    def speak(self, text: str):
        if self.synthesizer is None:
            return None
        self.is_speaking = True
        self._speech = self.synthesizer.speak(Utterance(text))
        self._speech.add_done_callback(self._speech_done)
        return self._speech

    def _speech_done(self, future):
        if future is self._speech:
            self.is_speaking = False

    def stop_speaking(self):
        if self.synthesizer is not None:
            self.synthesizer.cancel()
        if self._speech is not None:
            self._speech.cancel()
        self.is_speaking = False
