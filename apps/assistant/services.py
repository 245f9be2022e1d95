"""
Pharmacist assistant services.

`AssistantGateway` talks to Google Gemini through the google-genai SDK and
raises `GatewayError` on any failure. `PharmacistAssistant` is what the
terminal calls: it never raises and answers with a fallback instead.
"""
import json
import logging

from django.conf import settings
from google import genai
from google.genai import types

from apps.terminal.exceptions import GatewayError
from .serializers import InventoryHealthSerializer, MedicineSummarySerializer

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Error connecting to AI Assistant. Please check your connectivity."
EMPTY_REPLY = "I'm sorry, I couldn't process that request."
FALLBACK_HEALTH = {
    "criticalItems": [],
    "summary": "Inventory analysis unavailable.",
    "restockPriority": "Low",
}

INSTRUCTIONS = (
    "You are a professional pharmacist assistant. Help the user manage the pharmacy, "
    "analyze stock trends, suggest restocks based on low stock levels, or answer medical "
    "questions based on common knowledge (always with a disclaimer). Be concise and professional."
)

HEALTH_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "criticalItems": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            description="List of medicine names that need urgent restocking.",
        ),
        "summary": types.Schema(
            type=types.Type.STRING,
            description="A short 2-sentence summary of the overall inventory health.",
        ),
        "restockPriority": types.Schema(
            type=types.Type.STRING,
            enum=InventoryHealthSerializer.PRIORITIES,
            description="Overall urgency for restocking.",
        ),
    },
    required=["criticalItems", "summary", "restockPriority"],
)


def build_snapshot(ledger, history):
    """
    Read-only view of the terminal handed to the assistant.
    """
    return {
        "medicines": MedicineSummarySerializer(ledger.all(), many=True).data,
        "salesCount": len(history),
    }


class AssistantGateway:
    def __init__(self, api_key=None, model=None, timeout=None, client=None):
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or settings.ASSISTANT_MODEL
        self.timeout = settings.ASSISTANT_TIMEOUT_SECONDS if timeout is None else timeout
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise GatewayError("Assistant API key is not configured.")
            try:
                self._client = genai.Client(
                    api_key=self.api_key,
                    http_options=types.HttpOptions(timeout=int(self.timeout * 1000)),
                )
            except Exception as exc:
                logger.exception("Could not create the assistant client")
                raise GatewayError(f"Assistant client unavailable: {exc}") from exc
        return self._client

    def _generate(self, contents, config):
        """Send one request and return the reply text."""
        client = self.client
        try:
            response = client.models.generate_content(model=self.model, contents=contents, config=config)
            return response.text
        except Exception as exc:
            logger.exception("Assistant request to %s failed", self.model)
            raise GatewayError(f"Assistant request failed: {exc}") from exc

    def complete(self, prompt, snapshot):
        context = (
            f"Current Inventory: {json.dumps(snapshot['medicines'])}\n\n"
            f"Recent Sales Summary: Total sales count is {snapshot['salesCount']}.\n\n"
            f"Instructions: {INSTRUCTIONS}"
        )
        contents = [
            types.Content(role="user", parts=[types.Part(text=context)]),
            types.Content(role="user", parts=[types.Part(text=prompt)]),
        ]
        config = types.GenerateContentConfig(
            temperature=settings.ASSISTANT_TEMPERATURE,
            top_p=0.95,
            top_k=40,
        )
        text = self._generate(contents, config)
        return (text or "").strip()

    def analyze_inventory(self, snapshot):
        contents = (
            "Analyze this pharmacy inventory and provide a structured JSON health check: "
            f"{json.dumps(snapshot['medicines'])}"
        )
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=HEALTH_SCHEMA,
        )
        text = self._generate(contents, config)
        try:
            document = json.loads(text or "{}")
        except json.JSONDecodeError as exc:
            raise GatewayError(f"Assistant returned invalid JSON: {exc}") from exc

        serializer = InventoryHealthSerializer(data=document)
        if not serializer.is_valid():
            raise GatewayError(f"Assistant returned an unexpected health check: {serializer.errors}")
        return dict(serializer.validated_data)


class PharmacistAssistant:
    """
    Safe front of the assistant gateway.
    """

    def __init__(self, gateway=None):
        self.gateway = gateway or AssistantGateway()

    def ask(self, prompt, ledger, history):
        try:
            reply = self.gateway.complete(prompt, build_snapshot(ledger, history))
        except GatewayError as exc:
            logger.warning("Assistant unavailable: %s", exc)
            return FALLBACK_REPLY
        return reply or EMPTY_REPLY

    def inventory_health(self, ledger, history=()):
        try:
            return self.gateway.analyze_inventory(build_snapshot(ledger, history))
        except GatewayError as exc:
            logger.warning("Inventory analysis unavailable: %s", exc)
            return dict(FALLBACK_HEALTH)
