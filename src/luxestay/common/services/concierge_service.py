import json
import logging
import os
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from luxestay.common.models.rooms import Room
from luxestay.common.schemas.ai import RecommendationList
from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import TextGenerationError

logger = logging.getLogger(__name__)

BEDROCK_MODEL_ID = os.environ.get(
    "BEDROCK_MODEL_ID", "anthropic.claude-3-haiku-20240307-v1:0"
)

CHAT_FALLBACK = (
    "I'm sorry, I'm having trouble connecting to the concierge service right now."
)

CONCIERGE_PROMPT = (
    "You are the AI Concierge for LuxeStay, a luxury hotel booking platform. "
    "Here are the key details about our hotel:\n"
    "- Breakfast: Continental breakfast is INCLUDED with ALL bookings.\n"
    "- Check-in: 2:00 PM\n"
    "- Check-out: 11:00 AM\n"
    "- Amenities: Free high-speed Wi-Fi, 24/7 Gym, Rooftop Swimming Pool, and Luxury Spa.\n"
    "- Location: 123 Luxury Avenue, Paradise City.\n"
    "- Parking: Free valet parking for all guests.\n"
    "Assist guests with questions about our rooms, amenities, and policies based on "
    "this information. Be polite, professional, and concise. If a guest asks something "
    "not covered here, say you will check with the front desk. Do not answer questions "
    "unrelated to the hotel."
)

RECOMMENDATION_PROMPT = (
    "You are an expert hotel booking assistant for LuxeStay. Recommend the best rooms "
    "for the guest based on their request. You receive the guest request and a JSON "
    "list of available rooms. Weigh budget, vibe and amenities. Return a JSON object "
    "with a single key 'recommendations' holding a list of objects with 'room_id' "
    "(string, matching an input room), 'match_score' (integer 0-100) and 'reason' "
    "(string, why this room fits). Return raw JSON only, no markdown."
)


class TextGenerator:
    """Thin wrapper over the Bedrock Converse API."""

    def __init__(self, model_id: str = BEDROCK_MODEL_ID, client=None, region: str = AWS_REGION):
        self.model_id = model_id
        self.region = region
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("bedrock-runtime", region_name=self.region)
        return self._client

    def complete(self, prompt: str, system: Optional[str] = None, max_tokens: int = 512) -> str:
        request = {
            "modelId": self.model_id,
            "messages": [{"role": "user", "content": [{"text": prompt}]}],
            "inferenceConfig": {"maxTokens": max_tokens, "temperature": 0.3},
        }
        if system:
            request["system"] = [{"text": system}]

        try:
            response = self.client.converse(**request)
            return response["output"]["message"]["content"][0]["text"]
        except (ClientError, BotoCoreError) as err:
            raise TextGenerationError(f"text generation failed: {err}") from err
        except (KeyError, IndexError, TypeError) as err:
            raise TextGenerationError("text generation returned no text") from err


def strip_markdown_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


class ConciergeService:
    """Guest Q&A and room recommendations; never fails the request."""

    def __init__(self, generator: Optional[TextGenerator] = None):
        self.generator = generator or TextGenerator()

    def chat(self, message: str) -> str:
        try:
            return self.generator.complete(
                f"User Question: {message}", system=CONCIERGE_PROMPT
            )
        except TextGenerationError as err:
            logger.warning(f"Concierge chat degraded to fallback: {err}")
            return CHAT_FALLBACK

    def recommend_rooms(self, query: str, rooms: List[Room]) -> dict:
        if not rooms:
            return RecommendationList().model_dump()

        inventory = json.dumps([room.to_dict() for room in rooms])
        try:
            raw = self.generator.complete(
                f"User Request: {query}\n\nAvailable Rooms: {inventory}",
                system=RECOMMENDATION_PROMPT,
                max_tokens=1024,
            )
            parsed = RecommendationList.model_validate_json(strip_markdown_fences(raw))
        except TextGenerationError as err:
            logger.warning(f"Room recommendations degraded to fallback: {err}")
            return RecommendationList().model_dump()
        except ValidationError as err:
            logger.warning(f"Room recommendations were not valid JSON: {err}")
            return RecommendationList().model_dump()

        known = {room.room_id for room in rooms}
        parsed.recommendations = [
            rec for rec in parsed.recommendations if rec.room_id in known
        ]
        parsed.recommendations.sort(key=lambda rec: rec.match_score, reverse=True)
        return parsed.model_dump()
