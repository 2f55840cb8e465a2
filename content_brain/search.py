"""
Whitepaper search used by the theme generator and researcher

Whitepaper chunks live in one chromadb collection per whitepaper and are
embedded with HuggingFace sentence-transformers.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from . import config

logger = logging.getLogger(__name__)

NO_EVIDENCE = "No whitepaper evidence available. Rely on the marketing brief."
MAX_SEARCHES = 6
MAX_EVIDENCE_RESULTS = 20
EVIDENCE_SNIPPET_CHARS = 400


@dataclass
class SearchResult:
    id: str
    text: str
    score: float
    category: Optional[str] = None


class WhitepaperSearch(Protocol):
    def search(self, whitepaper_id: str, query: str, top_k: int = config.SEARCH_TOP_K) -> list[SearchResult]: ...


def collection_name(whitepaper_id: str) -> str:
    return f"whitepaper-{whitepaper_id}"


def make_chroma_client():
    """Chroma client from environment: HTTP server, local path or in-memory"""
    import chromadb

    if config.CHROMA_HOST:
        return chromadb.HttpClient(host=config.CHROMA_HOST, port=config.CHROMA_PORT)
    if config.CHROMA_PATH:
        return chromadb.PersistentClient(path=config.CHROMA_PATH)
    return chromadb.Client()


class ChromaWhitepaperSearch:
    """Semantic search over whitepaper chunks stored in chromadb"""

    def __init__(self, client=None, embeddings=None):
        self.client = client or make_chroma_client()
        if embeddings is None:
            from langchain_huggingface import HuggingFaceEmbeddings
            embeddings = HuggingFaceEmbeddings(model_name=config.EMBEDDING_MODEL)
        self.embeddings = embeddings

    def _collection(self, whitepaper_id: str):
        return self.client.get_or_create_collection(
            name=collection_name(whitepaper_id),
            metadata={"hnsw:space": "cosine"},
        )

    def add_chunks(self, whitepaper_id: str, chunks: list[dict]) -> int:
        """
        Index whitepaper chunks

        Args:
            whitepaper_id: Whitepaper the chunks belong to
            chunks: Dicts with "id", "text" and optional "category"

        Returns:
            Number of chunks indexed
        """
        if not chunks:
            return 0
        texts = [chunk["text"] for chunk in chunks]
        self._collection(whitepaper_id).upsert(
            ids=[str(chunk["id"]) for chunk in chunks],
            documents=texts,
            embeddings=self.embeddings.embed_documents(texts),
            metadatas=[{"category": chunk.get("category") or "general"} for chunk in chunks],
        )
        return len(chunks)

    def search(self, whitepaper_id: str, query: str, top_k: int = config.SEARCH_TOP_K) -> list[SearchResult]:
        collection = self._collection(whitepaper_id)
        count = collection.count()
        if count == 0:
            return []

        result = collection.query(
            query_embeddings=[self.embeddings.embed_query(query)],
            n_results=min(top_k, count),
            include=["documents", "metadatas", "distances"],
        )
        ids = result["ids"][0]
        documents = result["documents"][0]
        metadatas = result["metadatas"][0]
        distances = result["distances"][0]

        return [
            SearchResult(
                id=chunk_id,
                text=document or "",
                score=round(1.0 - distance, 4),
                category=(metadata or {}).get("category"),
            )
            for chunk_id, document, metadata, distance in zip(ids, documents, metadatas, distances)
        ]


async def gather_evidence(
    searcher: Optional[WhitepaperSearch],
    whitepaper_id: Optional[str],
    queries: list[str],
    agent_id: str,
    top_k: int = config.SEARCH_TOP_K,
) -> tuple[str, list[dict]]:
    """
    Run the queries against a whitepaper and format the best hits for a prompt

    Returns:
        Tuple of (evidence text, search history records)
    """
    if searcher is None or not whitepaper_id:
        return NO_EVIDENCE, []

    history = []
    best: dict[str, SearchResult] = {}

    for query in [q for q in queries if q and q.strip()][:MAX_SEARCHES]:
        logger.info("[Searching whitepaper %s: %r]", whitepaper_id, query)
        try:
            results = await asyncio.to_thread(searcher.search, whitepaper_id, query, top_k)
        except Exception as e:
            logger.warning("✗ Search failed for %r: %s", query, e)
            history.append({"agent_id": agent_id, "query": query, "result_count": 0, "error": str(e)})
            continue

        history.append({"agent_id": agent_id, "query": query, "result_count": len(results)})
        for result in results:
            if result.id not in best or result.score > best[result.id].score:
                best[result.id] = result

    ranked = sorted(best.values(), key=lambda r: r.score, reverse=True)[:MAX_EVIDENCE_RESULTS]
    if not ranked:
        return NO_EVIDENCE, history

    logger.info("✓ %s unique finding(s) from %s search(es)", len(ranked), len(history))
    evidence = "\n".join(
        f"{i}. (Score: {result.score:.4f}, Category: {result.category or 'General'}) "
        f"{result.text[:EVIDENCE_SNIPPET_CHARS]}"
        for i, result in enumerate(ranked, 1)
    )
    return evidence, history
