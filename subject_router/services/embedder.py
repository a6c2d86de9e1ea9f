"""
Local sentence-transformers embeddings.

The model is loaded lazily on first use (thread-safe) and all encoding runs in
the threadpool so the event loop keeps serving other turns.
"""
import logging
from threading import Lock
from typing import List, Optional

import numpy as np
from fastapi.concurrency import run_in_threadpool


class SentenceTransformerEmbedder:
    def __init__(self, model_name: str, device: str = "cpu", normalize: bool = True):
        self.model_name = model_name
        self.device = device
        self.normalize = normalize
        self._model = None
        self._lock = Lock()
        self.vector_dimension: Optional[int] = None

    def _load(self):
        with self._lock:
            if self._model is None:
                # Imported here so the model stack only loads when documents are indexed
                from sentence_transformers import SentenceTransformer

                logging.info(f"[Embedder] Loading model: {self.model_name} on device {self.device}")
                self._model = SentenceTransformer(self.model_name, device=self.device)
            return self._model

    def _encode(self, texts: List[str]) -> List[List[float]]:
        model = self._load()
        vectors = model.encode(texts, convert_to_numpy=True)

        if self.vector_dimension is None:
            self.vector_dimension = int(vectors.shape[1])
            logging.info(f"[Embedder] Vector dimension locked at {self.vector_dimension}")
        elif vectors.shape[1] != self.vector_dimension:
            raise ValueError(
                f"Embedding dimension mismatch. Expected {self.vector_dimension}, got {vectors.shape[1]}"
            )

        if self.normalize:
            norms = np.linalg.norm(vectors, axis=1, keepdims=True)
            norms[norms == 0] = 1
            vectors = vectors / norms

        return vectors.tolist()

    async def embed(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        return await run_in_threadpool(self._encode, texts)
