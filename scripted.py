# scripted.py
#
# Description: Keyword-matching WanderBot replies for demos without a
#              provider key. Exposed as a ChatCompletionProvider so it can sit
#              in a ReplyGenerator chain like any hosted model.

from __future__ import annotations

import random
from typing import List, Sequence, Tuple

from history_utils import last_user_message
from llm_client import CompletionRequest

# --------------------------------------------------------------------------- #
# reply table
# --------------------------------------------------------------------------- #
# First matching rule wins, so app help stays ahead of the generic greeting.
KEYWORD_REPLIES: List[Tuple[Tuple[str, ...], str]] = [
    (
        ("add place", "add location", "marker", "pin"),
        "To add a place: Click 'Add Place' → click on the map to auto-fill name and "
        "coordinates → add notes/category on the left → 'Add to Log'.",
    ),
    (
        ("hello", "hi"),
        "Hello! I'm WanderBot, your travel companion. I can help you discover amazing "
        "places, plan your trips, and answer questions about destinations around the "
        "world. What would you like to explore today?",
    ),
    (
        ("places near me", "nearby"),
        "I'd love to help you find places nearby! I'll need your location for specific "
        "recommendations. Popular categories to explore:\n\n"
        "• Restaurants and cafes\n• Historical landmarks\n• Parks and nature spots\n"
        "• Museums and galleries\n\nWhat type of places interest you most?",
    ),
    (
        ("manali",),
        "Manali is a beautiful hill station in Himachal Pradesh, India! Must-visit places:\n\n"
        "🏔️ Rohtang Pass - Stunning mountain views\n"
        "• Hadimba Temple - Ancient cedar wood temple\n"
        "• Solang Valley - Adventure sports hub\n"
        "• Old Manali - Charming cafes and local culture\n\n"
        "Best time to visit: March to June, or December to February for snow.",
    ),
    (
        ("paris",),
        "Paris, the City of Light! The essentials:\n\n"
        "🗼 Eiffel Tower - Iconic landmark\n"
        "• Louvre Museum - World's largest art museum\n"
        "• Champs-Élysées - Famous shopping street\n"
        "• Arc de Triomphe - Historical monument\n\n"
        "Pro tip: a Museum Pass gets you skip-the-line access.",
    ),
    (
        ("tokyo",),
        "Tokyo blends tradition and modernity!\n\n"
        "• Senso-ji Temple - Ancient Buddhist temple\n"
        "• Shibuya Crossing - World's busiest intersection\n"
        "• Tsukiji Outer Market - Fresh sushi and street food\n"
        "• Tokyo Skytree - Panoramic city views\n\n"
        "Cherry blossom season (March-May) is magical.",
    ),
    (
        ("budget", "cheap", "affordable"),
        "Budget-friendly travel tips:\n\n"
        "💰 Accommodation: hostels or guesthouses\n"
        "• Food: local street food and markets\n"
        "• Transport: public transportation\n"
        "• Activities: free walking tours and museums\n\n"
        "Want budget ideas for a particular destination?",
    ),
    (
        ("weather", "climate", "best time"),
        "Weather can make or break a trip:\n\n"
        "• Research seasonal patterns for your destination\n"
        "• Pack layers\n• Check forecasts before departure\n"
        "• Consider off-season travel for better prices\n\n"
        "Which destination are you planning to visit?",
    ),
    (
        ("itinerary", "plan", "days"),
        "I can help plan an itinerary! Tell me: destination, number of days, and your "
        "travel style (culture, food, nature, nightlife). I'll suggest a day-by-day plan.",
    ),
    (
        ("visa", "passport", "entry"),
        "Visa requirements vary by nationality and destination. Check your destination's "
        "official immigration website or the IATA Travel Centre. Tell me your nationality "
        "and destination, and I'll point you to the right resource.",
    ),
    (
        ("safety", "safe", "scam"),
        "General safety tips: keep valuables minimal, use registered taxis, avoid poorly "
        "lit areas late at night, and keep digital copies of documents.",
    ),
    (
        ("food", "restaurant", "cafe", "eat"),
        "I'd love to recommend food spots! Let me know your destination and cuisine "
        "preference (local, vegetarian, street food, cafes, fine dining).",
    ),
]

DEFAULT_REPLIES: Tuple[str, ...] = (
    "I can help with itineraries, tips, and destination ideas. Tell me your destination "
    "and how many days you have.",
    "What destination are you considering? I can suggest must-see spots, local food, and "
    "the best time to visit.",
    "Share your travel style (adventure, culture, food, chill), and I'll tailor "
    "recommendations.",
    "Ask about visas, budgets, packing, or safety - happy to help you plan a smooth trip!",
)


def scripted_reply(
    message: str,
    rng: random.Random,
    rules: Sequence[Tuple[Tuple[str, ...], str]] = KEYWORD_REPLIES,
) -> str:
    """Return the first keyword reply matching `message`, else a random default."""
    lowered = message.lower().strip()
    for keywords, reply in rules:
        if any(keyword in lowered for keyword in keywords):
            return reply
    return rng.choice(DEFAULT_REPLIES)


class ScriptedProvider:
    """Answers the latest user turn from KEYWORD_REPLIES; never calls the network."""

    name = "scripted"

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def complete(self, request: CompletionRequest) -> str:
        return scripted_reply(last_user_message(request.messages), self.rng)
