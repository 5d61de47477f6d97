from idp.inference.client_base import BaseInferenceClient
from idp.inference.factory import InferenceClientFactory

__all__ = ["BaseInferenceClient", "InferenceClientFactory"]
