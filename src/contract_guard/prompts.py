"""
Prompt templates for contract risk analysis.
"""

SYSTEM_PROMPT = (
    "You are a legal expert specializing in contract analysis. "
    "Provide clear, actionable insights in JSON format only."
)

ANALYSIS_PROMPT = """
You are a legal contract analysis expert. Analyze the following contract and provide a comprehensive assessment.

CONTRACT FILE: {file_name}
CONTRACT TEXT:
{contract_text}

Please provide your analysis in the following JSON format:
{{
  "summary": "A brief, easy-to-understand summary of the contract in 2-3 sentences using plain language",
  "keyHighlights": ["3-5 key points about the contract terms"],
  "contractType": "employment|service-agreement|rental-lease|purchase-agreement|non-disclosure|partnership|licensing|consulting|other",
  "riskyClauses": [
    {{
      "title": "Clear title for the risky clause",
      "quote": "Exact quote from contract (max 200 chars)",
      "explanation": "Why this clause is risky in simple terms",
      "severity": "Low|Medium|High",
      "category": "termination|penalty|auto-renewal|non-compete|arbitration|liability|hidden-fees|refund-restrictions|data-privacy|intellectual-property|other",
      "riskScore": 1-10
    }}
  ],
  "negotiationTips": ["3-5 specific suggestions for negotiating better terms"],
  "confidence": 0.0-1.0
}}

Focus on:
1. Use simple, non-legal language that anyone can understand
2. Identify clauses that could financially harm or legally bind the signer
3. Provide actionable negotiation advice
4. Be thorough but concise
5. Rate risk severity based on potential impact to the average person

IMPORTANT: Return only valid JSON, no additional text."""

EXPLANATION_PROMPT = (
    'Explain why this contract clause is risky in simple terms (max 100 words): "{quote}"'
)

TRUNCATION_MARKER = " ...[truncated]"
