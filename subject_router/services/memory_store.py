import logging
from typing import Dict, List, Optional

import chromadb
from fastapi.concurrency import run_in_threadpool

from subject_router.services.utils import chunk_text, clean_user_text, collection_name


# -------------------------
# MEMORY STORE
# -------------------------

class MemoryStore:
    """
    Embedding-backed passage store with one chromadb collection per subject.

    Embeddings are computed by the injected embedder and passed to chromadb
    explicitly; collections carry no embedding function of their own.
    """

    def __init__(
        self,
        embedder,
        client=None,
        chunk_size: int = 1000,
        chunk_overlap: int = 100,
        max_distance: Optional[float] = None
    ):
        self.embedder = embedder
        self.client = client if client is not None else chromadb.EphemeralClient()
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_distance = max_distance

    def _collection(self, collection: str):
        return self.client.get_or_create_collection(
            name=collection_name(collection),
            embedding_function=None,
            metadata={"hnsw:space": "cosine"}
        )

    # -------------------------
    # SAVE
    # -------------------------
    async def save_information(self, collection: str, id: str, text: str) -> int:
        """
        Chunk `text` and store every passage under `collection`.
        Returns the number of passages stored.
        """
        chunks = chunk_text(clean_user_text(text), self.chunk_size, self.chunk_overlap)
        if not chunks:
            raise ValueError(f"No text to store for '{id}'.")

        vectors = await self.embedder.embed(chunks)
        ids = [f"{id}_{i}" for i in range(len(chunks))]
        metadatas = [{"source_id": id, "chunk": i} for i in range(len(chunks))]

        target = await run_in_threadpool(self._collection, collection)
        await run_in_threadpool(
            target.upsert,
            ids=ids,
            embeddings=vectors,
            documents=chunks,
            metadatas=metadatas
        )

        logging.info(f"[MemoryStore] Stored {len(chunks)} passages for {id} in {collection}")
        return len(chunks)

    # -------------------------
    # RECALL
    # -------------------------
    async def recall(self, collection: str, query: str, top_k: int = 3) -> List[Dict]:
        """Return the passages closest to `query`, nearest first."""
        target = await run_in_threadpool(self._collection, collection)
        count = await run_in_threadpool(target.count)
        if count == 0:
            return []

        [query_vector] = await self.embedder.embed([query])
        results = await run_in_threadpool(
            target.query,
            query_embeddings=[query_vector],
            n_results=min(top_k, count)
        )

        ids_list = results.get("ids") or [[]]
        documents_list = results.get("documents") or [[]]
        metadatas_list = results.get("metadatas") or [[]]
        distances_list = results.get("distances") or [[]]

        passages = []
        for i, doc_id in enumerate(ids_list[0]):
            distance = distances_list[0][i] if i < len(distances_list[0]) else None
            if self.max_distance is not None and distance is not None and distance > self.max_distance:
                continue
            passages.append({
                "id": doc_id,
                "document": documents_list[0][i] if i < len(documents_list[0]) else None,
                "metadata": metadatas_list[0][i] if i < len(metadatas_list[0]) else {},
                "distance": distance,
            })
        return passages
