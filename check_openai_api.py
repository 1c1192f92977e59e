"""Check the OpenAI analysis response format against the live API"""

import asyncio
import json
import os
import sys

# Add src directory to Python path
src_path = os.path.join(os.getcwd(), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from gadget_risk.config import Settings, load_env_file
from gadget_risk.openai_analyst import OpenAIRiskAnalyst, build_analysis_context
from gadget_risk.reference_data import create_sample_assessments
from gadget_risk.scoring import score_assessment

load_env_file(os.path.join(os.path.dirname(os.path.abspath(__file__)), '.env'))

print("=" * 80)
print("Checking OpenAI Analysis Response")
print("=" * 80)

# Setup data
data = create_sample_assessments()["high_risk"]
result = score_assessment(data)

print("\n1. Deterministic result:")
print(f"   Risk level: {result.risk_level.label}")
print(f"   Probability: {result.probability:.2f}")
print(f"   Anomaly: {result.anomaly_detected}")

print("\n2. Initializing OpenAI Analyst...")
settings = Settings.from_env()
try:
    analyst = OpenAIRiskAnalyst(
        api_key=settings.openai_api_key,
        model=settings.model,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )
    print("   ✓ OpenAI API initialized")
except Exception as e:
    print(f"   ✗ Failed: {e}")
    print("\n   Make sure OPENAI_API_KEY is set in .env file!")
    sys.exit(1)

print("\n" + "=" * 80)
print("CONTEXT SENT TO OPENAI:")
print("=" * 80)
print(json.dumps(build_analysis_context(data, result), indent=2))
print("=" * 80)

print("\n3. Calling OpenAI API...")
outcome = asyncio.run(analyst.analyze(data, result))

if outcome.succeeded:
    print("\n" + "=" * 80)
    print("API RESPONSE (validated analysis):")
    print("=" * 80)
    print(json.dumps(outcome.analysis.model_dump(), indent=2))
    print("\n" + "=" * 80)
    print("✓ CHECK PASSED: OpenAI API is working correctly!")
    print("=" * 80)
else:
    print(f"\n✗ CHECK FAILED: {outcome.error}")
    print("=" * 80)
    sys.exit(1)
