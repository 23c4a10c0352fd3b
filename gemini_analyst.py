"""
Analyst Console - Gemini Analyst
Builds the analysis prompt and sends it to Gemini with Google Search grounding.
"""
import logging
from typing import Any, Dict, List, Optional

import google.generativeai as genai

from config import get_api_key
from errors import AnalysisRequestError, MissingApiKeyError
from technical_data import AnalysisResponse, GroundingSource, TechnicalData

logger = logging.getLogger(__name__)

EMPTY_RESPONSE_MARKDOWN = "Analysis generation failed. Please try again."

SYSTEM_INSTRUCTION = "Act as a world-class Cryptocurrency Technical Analyst."


def build_prompt(ticker: str, data: TechnicalData) -> str:
    """
    Assemble the analysis prompt. Same inputs always give the same text.
    """
    sr = data.support_resistance
    fvg = data.fvg_fibs
    candle = data.candle_fibs
    tf = data.time_fibs
    sweep = data.weekly_sweep

    return f"""{SYSTEM_INSTRUCTION}
Perform a deep analysis for the ticker: {ticker}.

I have provided the following technical inputs:

1. Current Price (Reference): {data.current_price or 'Please fetch current price'}

2. Support & Resistance Levels (Key Levels per timeframe):
   - 2h: {sr['2h']}
   - 4h: {sr['4h']}
   - Daily: {sr['1D']}
   - Weekly: {sr['1W']}

3. Weekly Sweeps (Liquidity Grabs):
   - Event 1: {sweep['sweep1']}
   - Event 2: {sweep['sweep2']}

4. FVG (Fair Value Gap) Fibs:
   - 2h: {fvg['2h']}
   - 4h: {fvg['4h']}
   - Daily: {fvg['1D']}
   - Weekly: {fvg['1W']}

5. Candle Fibs:
   - 2h: {candle['2h']}
   - 4h: {candle['4h']}
   - Daily: {candle['1D']}
   - Weekly: {candle['1W']}

6. Time Vertical Fibs (Based on {data.time_fibs_timeframe or '2h'} Chart):
   - 0.0: {tf['t0']}
   - 0.618: {tf['t0_618']}
   - 0.786: {tf['t0_786']}
   - 1.618: {tf['t1_618']}

TASK:
Generate a comprehensive analysis report using the provided technicals combined with live market data found via Google Search.

Use Google Search to specifically find:
1. "Hyperliquid whale positions" or general whale/smart money positioning relevant to {ticker}.
2. "X / twitter sentiments" - Recent impactful tweets or sentiment regarding {ticker}.

OUTPUT FORMAT (Markdown):

## {ticker} Technical Analysis

### 1. 2H & 4H Analysis (Lower Time Frame)
*Synthesize the 2h, 4h Support/Resistance, FVG Fibs, and Candle Fibs. Identify immediate trends, entries, or invalidation points.*

### 2. High Time Frame Analysis (Daily & Weekly)
*Synthesize Daily/Weekly S/R, Weekly Sweeps, and major Fib levels. Determine the macro bias.*

### 3. Hyperliquid Whale Positions & Smart Money
*Summarize findings from search regarding Open Interest (OI), funding rates, or whale movements on Hyperliquid/Binance.*

### 4. Market Sentiment (X / Twitter)
*Summarize current social sentiment. Bullish/Bearish? What are the KOLs saying?*

### 5. Final Summary
*Conclusive actionable bias (Long/Short/Neutral) with key levels to watch based on the Time Vertical Fibs and Price Levels.*

On its own line, exactly in this form:
**AI Conviction Score:** X/10 (one short phrase explaining the score)

### Social Media Summary
*A 2-3 sentence post (under 280 characters) summarizing the bias and key levels for X / Twitter. This section must be the last thing in the report.*
"""


def extract_grounding_sources(payload: Optional[Dict[str, Any]]) -> List[GroundingSource]:
    """
    Pull web citations out of a response dict.

    Chunks with no `web` entry are dropped; any missing level yields [].
    """
    try:
        candidates = (payload or {}).get('candidates') or []
        if not candidates:
            return []
        metadata = candidates[0].get('grounding_metadata') or {}
        chunks = metadata.get('grounding_chunks') or []
    except AttributeError:
        return []

    sources = []
    for chunk in chunks:
        web = chunk.get('web') if isinstance(chunk, dict) else None
        if not web:
            continue
        sources.append(GroundingSource(title=web.get('title') or web.get('uri', ''), uri=web.get('uri', '')))
    return sources


def _response_text(response) -> str:
    # .text raises ValueError when the candidate was blocked or has no parts
    try:
        return response.text or ""
    except ValueError:
        return ""


class GeminiAnalystClient:
    """
    One-shot analysis requests against an injected Gemini model.

    Args:
        model: A genai.GenerativeModel (or anything with generate_content)
        use_search: Ask for Google Search grounding
        temperature: Sampling temperature
        max_output_tokens: Response length cap
    """

    def __init__(self, model, use_search: bool = True, temperature: float = 0.4,
                 max_output_tokens: int = 4096):
        self.model = model
        self.use_search = use_search
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    def analyze(self, ticker: str, data: TechnicalData) -> AnalysisResponse:
        prompt = build_prompt(ticker, data)
        request = {
            'generation_config': genai.types.GenerationConfig(
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
                response_mime_type='text/plain',
            ),
        }
        if self.use_search:
            request['tools'] = 'google_search_retrieval'

        try:
            response = self.model.generate_content(prompt, **request)
        except Exception as e:
            logger.exception("Analysis request for %s failed", ticker)
            raise AnalysisRequestError(str(e)) from e

        markdown = _response_text(response) or EMPTY_RESPONSE_MARKDOWN
        try:
            payload = response.to_dict()
        except Exception:
            logger.warning("Could not read grounding metadata for %s", ticker)
            payload = None

        return AnalysisResponse(markdown=markdown, grounding_sources=extract_grounding_sources(payload))


def create_gemini_client(config: Dict) -> GeminiAnalystClient:
    """Composition-root factory: configure the SDK and wrap the model."""
    api_key = get_api_key()
    if not api_key:
        raise MissingApiKeyError("Set GOOGLE_API_KEY (or GEMINI_API_KEY) in the environment or Streamlit secrets")

    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(config['model'])
    return GeminiAnalystClient(
        model,
        use_search=config.get('use_search', True),
        temperature=config.get('temperature', 0.4),
        max_output_tokens=config.get('max_output_tokens', 4096),
    )
