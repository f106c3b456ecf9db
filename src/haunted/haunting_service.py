import asyncio
import time
import logging
from typing import List, Optional

from .chunking import chunk_text, merge_chunks
from .config import get_settings
from .llm_service import OllamaLLMService, get_llm_service
from .models import (
    HauntRequest, HauntResponse, RetryOptions, StudyMode, TextChunk, TopicRequest
)
from .pagination import divide_into_pages
from .retry import call_with_retry
from .text_sanitization import sanitize_extracted_text

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS = (
    "Rewrite the following course material as a haunted, gothic lecture delivered from beyond the grave. "
    "Keep every fact, heading and section in the same order."
)

FORMAT_INSTRUCTIONS = (
    "Use proper markdown formatting with clear headings and structure. "
    "Make it comprehensive and educational."
)

TOPIC_PROMPTS = {
    StudyMode.OVERVIEW: (
        'Provide a comprehensive overview of "{topic}" from the unit "{unit}". Include the main concepts, '
        "key definitions, and important points that explain what this topic is about. "
        "Use clear headings and bullet points."
    ),
    StudyMode.INDEPTH: (
        'Provide an in-depth explanation of "{topic}" from the unit "{unit}". Include detailed explanations, '
        "examples, step-by-step breakdowns, and comprehensive coverage of all aspects of this topic. "
        "Use proper headings and formatting."
    ),
    StudyMode.TAKEAWAYS: (
        'Provide the key takeaways for "{topic}" from the unit "{unit}". Focus on the most important facts, '
        "concepts, and information that someone must know about this topic. Present as clear, memorable points."
    ),
}

# haunting service runs sanitize -> chunk -> llm per chunk -> merge -> paginate
class HauntingService:
    def __init__(self, llm_service: Optional[OllamaLLMService] = None, retry_options: Optional[RetryOptions] = None):
        self.llm_service = llm_service or get_llm_service()
        self.retry_options = retry_options or get_settings().retry_options()

    async def haunt(self, request: HauntRequest) -> HauntResponse:
        """Main processing pipeline"""
        start_time = time.time()

        try:
            text = sanitize_extracted_text(request.text)
            if not text:
                return HauntResponse(success=False, message="No text provided")

            logger.info(f"Starting haunting: {len(text)} characters")
            logger.info("=" * 60)

            # Step 1: Chunk
            chunks = chunk_text(text, request.max_chunk_size, request.overlap_size)
            logger.info(f"Step 1: ✓ Created {len(chunks)} chunks (max={request.max_chunk_size}, overlap={request.overlap_size})")

            # Step 2: One llm call per chunk, in order
            logger.info("Step 2: Generating haunted text...")
            instructions = request.instructions or DEFAULT_INSTRUCTIONS
            processed: List[TextChunk] = []
            for chunk in chunks:
                processed.append(await self._process_chunk(chunk, len(chunks), instructions))
                logger.info(f"  ✓ Chunk {chunk.index + 1}/{len(chunks)} ({chunk.character_count} chars)")

            # Step 3: Merge and paginate
            haunted_text = merge_chunks(processed, request.overlap_size)
            pages = divide_into_pages(haunted_text, request.characters_per_page)

            processing_time = time.time() - start_time
            logger.info("=" * 60)
            logger.info(f"✓ SUCCESS! {len(haunted_text)} characters, {len(pages)} pages in {processing_time:.2f} seconds")

            return HauntResponse(
                success=True,
                message="Haunted text generated successfully",
                haunted_text=haunted_text,
                processed_chunks=len(processed),
                pages=pages,
                processing_time=processing_time
            )

        except Exception as e:
            processing_time = time.time() - start_time
            logger.error(f"✗ ERROR: {str(e)}", exc_info=True)
            return HauntResponse(
                success=False,
                message=f"Content generation failed: {str(e)}",
                processing_time=processing_time
            )

    async def haunt_topic(self, request: TopicRequest) -> HauntResponse:
        """Generate study material for one syllabus topic"""
        prompt = TOPIC_PROMPTS[request.mode].format(topic=request.topic, unit=request.unit_title)
        return await self.haunt(HauntRequest(
            text=f"Topic: {request.topic}\nUnit: {request.unit_title}",
            instructions=prompt,
            characters_per_page=request.characters_per_page
        ))

    # send one chunk to the llm and return a processed copy
    async def _process_chunk(self, chunk: TextChunk, total: int, instructions: str) -> TextChunk:
        prompt = self._build_prompt(chunk, total, instructions)

        async def generate() -> str:
            return await asyncio.to_thread(self.llm_service.generate_text, prompt)

        output = await call_with_retry(generate, self.retry_options)
        chunk.is_processed = True
        return TextChunk(index=chunk.index, content=output, character_count=len(output), is_processed=True)

    def _build_prompt(self, chunk: TextChunk, total: int, instructions: str) -> str:
        parts = [instructions]
        if total > 1:
            # the model has to know it is only seeing a slice of the document
            parts.append(
                f"This is part {chunk.index + 1} of {total} of a longer document. "
                "Continue seamlessly and do not add an introduction or conclusion unless the part has one."
            )
        parts.append(chunk.content)
        parts.append(FORMAT_INSTRUCTIONS)
        return "\n\n".join(parts)


def is_rate_limit_message(message: str) -> bool:
    lowered = message.lower()
    return "rate limit" in lowered or "quota" in lowered or "429" in lowered
