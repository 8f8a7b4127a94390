"""System prompts and chat request assembly for both request kinds."""

from dataclasses import dataclass
from typing import Optional

from .normalizer import ImageExplanationRequest, TextExplanationRequest
from .providers.base import ChatMessage, ProviderChatRequest


@dataclass(frozen=True)
class GenerationParams:
    """Fixed sampling parameters for one request kind."""
    
    temperature: float
    max_tokens: int


# Low temperature and a generous token limit: deterministic, complete solutions
TEXT_GENERATION = GenerationParams(temperature=0.3, max_tokens=4000)
IMAGE_GENERATION = GenerationParams(temperature=0.3, max_tokens=4000)

TEXT_SYSTEM_PROMPT = """You are a mathematics expert and tutor. Your ONLY job is to solve math problems and explain solutions clearly and concisely.

IMPORTANT RULES:
- Solve the exact problem given by the user, do not make up a different one
- Do NOT introduce yourself or give generic messages
- Break down the solution into clear, numbered steps
- Explain the reasoning for each step
- Use LaTeX notation for formulas: wrap in $ for inline math, $$ for display math
- Keep explanations brief but thorough
- Always show the final answer clearly
- Format your response using markdown

OUTPUT FORMAT:
Step 1: [What we're doing] [equation/work]
Step 2: [Next step] [equation/work]
...
**Final Answer:** [answer]"""

IMAGE_SYSTEM_PROMPT = """You are a mathematics expert and tutor. Your PRIMARY task is to ANALYZE and SOLVE the specific math problem shown in the PROVIDED IMAGE.

CRITICAL INSTRUCTIONS:
1. FIRST: Look at the image and describe what math problem you see
2. EXTRACT the exact equations/problems from the image - DO NOT guess or make up problems
3. Solve ONLY the problem shown in the image, not generic problems
4. Break down the solution into clear, numbered steps
5. Explain the reasoning for each step clearly
6. Use LaTeX notation for formulas: wrap in $ for inline math, $$ for display math
7. Always show the final answer clearly
8. If the image is unclear, ask for clarification rather than guessing
9. Format your response using markdown

OUTPUT FORMAT:
**Problem from Image:** [Clearly state what you see in the image]
**Solution:**
Step 1: [What we're doing] [equation/work]
Step 2: [Next step] [equation/work]
...
**Final Answer:** [answer]

REMEMBER: You MUST analyze the provided image. Do not ignore it or provide generic solutions."""

IMAGE_INSTRUCTION = (
    "Analyze and solve the math problem shown in this image. "
    "Be very specific about what you see in the image."
)


def image_instruction(additional_context: Optional[str] = None) -> str:
    """Instruction text for the image request, with optional trailing context."""
    if additional_context:
        return f"{IMAGE_INSTRUCTION} Additional context: {additional_context}"
    return IMAGE_INSTRUCTION


def build_text_request(request: TextExplanationRequest, model: str) -> ProviderChatRequest:
    """Assemble the chat request for a text problem.
    
    The problem string is sent as the whole user message, unchanged.
    """
    return ProviderChatRequest(
        model=model,
        messages=[
            ChatMessage(role="system", content=TEXT_SYSTEM_PROMPT),
            ChatMessage(role="user", content=request.problem),
        ],
        temperature=TEXT_GENERATION.temperature,
        max_tokens=TEXT_GENERATION.max_tokens,
    )


def build_image_request(request: ImageExplanationRequest, model: str) -> ProviderChatRequest:
    """Assemble the chat request for an image problem.
    
    The user message has two parts, instruction text first and the image
    second. The image goes out as a data URL rebuilt from the normalized
    media type and payload.
    """
    data_url = f"data:{request.media_type};base64,{request.image_data}"
    
    content = [
        {"type": "text", "text": image_instruction(request.additional_context)},
        {"type": "image_url", "image_url": {"url": data_url}},
    ]
    
    return ProviderChatRequest(
        model=model,
        messages=[
            ChatMessage(role="system", content=IMAGE_SYSTEM_PROMPT),
            ChatMessage(role="user", content=content),
        ],
        temperature=IMAGE_GENERATION.temperature,
        max_tokens=IMAGE_GENERATION.max_tokens,
    )
