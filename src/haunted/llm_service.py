# llm service using ollama for text generation and image reading
import requests
import json
import logging
from typing import List, Dict, Any, Optional

from .config import get_settings
from .exceptions import LLMServiceError

logger = logging.getLogger(__name__)

# client for the ollama generate and tags endpoints
class OllamaLLMService:
    """Text and vision generation against a local Ollama server"""

    # initialize service, availability is checked lazily so the api can start without ollama
    def __init__(self, base_url: Optional[str] = None, model: Optional[str] = None,
                 vision_model: Optional[str] = None, timeout: Optional[float] = None):
        settings = get_settings()
        self.base_url = (base_url or settings.ollama_url).rstrip("/")
        self.model = model or settings.model
        self.vision_model = vision_model or settings.vision_model
        self.timeout = timeout or settings.request_timeout
        self.session = requests.Session()

    # verify ollama server is running and model is available
    def check_availability(self, model: Optional[str] = None) -> None:
        """Check if Ollama is running and the model is installed"""
        model = model or self.model
        try:
            response = self.session.get(f"{self.base_url}/api/tags", timeout=5)
        except requests.exceptions.ConnectionError:
            raise LLMServiceError(
                "Cannot connect to Ollama (network error). Install it from https://ollama.ai/ and run: ollama serve",
                model=model
            )

        if response.status_code != 200:
            raise LLMServiceError(f"Ollama is not responding: {response.status_code}", model=model,
                                  status_code=response.status_code)

        # check if the requested model is installed
        models = response.json().get("models", [])
        model_names = [m["name"] for m in models]
        if not any(model in name for name in model_names):
            logger.warning(f"Model {model} not found. Available models: {model_names}")
            raise LLMServiceError(f"Model {model} not available. Run: ollama pull {model}", model=model)

        logger.info(f"✓ Ollama is running with model: {model}")

    # send one generate request and return the raw response text
    def _generate(self, payload: Dict[str, Any]) -> str:
        model = payload.get("model")
        try:
            response = self.session.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            raise LLMServiceError("Request timeout. The model might be too slow or overloaded.", model=model)
        except requests.exceptions.ConnectionError as e:
            raise LLMServiceError(f"Network error talking to Ollama: {e}", model=model)

        if response.status_code != 200:
            raise LLMServiceError(f"Ollama API error: {response.status_code} - {response.text}", model=model,
                                  status_code=response.status_code)

        return response.json().get("response", "").strip()

    # generate text using ollama api
    def generate_text(self, prompt: str, max_tokens: int = 8000, temperature: float = 0.7) -> str:
        """Generate text using Ollama"""
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
                "top_p": 0.9,
                "top_k": 40
            }
        }
        return self._generate(payload)

    # generate a json document, optionally reading base64 images with the vision model
    def generate_json(self, prompt: str, images: Optional[List[str]] = None,
                      temperature: float = 0.1) -> Dict[str, Any]:
        """Generate a JSON object using Ollama's json output mode"""
        payload = {
            "model": self.vision_model if images else self.model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {"temperature": temperature}
        }
        if images:
            payload["images"] = images

        raw = self._generate(payload)
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Model returned invalid JSON: {raw[:200]}")
            raise LLMServiceError(f"Model returned invalid JSON: {e}", model=payload["model"])

# global instance for singleton pattern
llm_service = None

# get or create the global llm service instance
def get_llm_service() -> OllamaLLMService:
    """Get or create the global LLM service instance"""
    global llm_service
    if llm_service is None:
        llm_service = OllamaLLMService()
    return llm_service
