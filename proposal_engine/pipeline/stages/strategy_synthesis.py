"""Stage 3: Strategy Synthesis."""

from dataclasses import dataclass

from proposal_engine.config.prompts import (
    STRATEGY_SYNTHESIS_INSTRUCTIONS,
    STRATEGY_SYNTHESIS_SYSTEM_PROMPT,
)
from proposal_engine.llm.structured import StructuredPrompt
from proposal_engine.models.enums import StageName
from proposal_engine.models.stages import Analysis, DataAnalysis, Strategy
from proposal_engine.pipeline.stages.base import StageExecutor, bullet_list, section


@dataclass(frozen=True)
class StrategySynthesisInput:
    data_analysis: DataAnalysis
    analysis: Analysis


class StrategySynthesisStage(StageExecutor[StrategySynthesisInput, Strategy]):
    stage = StageName.STRATEGY_SYNTHESIS
    schema = Strategy
    start_message = "Developing comprehensive bid strategy..."

    def build_prompt(self, inputs: StrategySynthesisInput) -> StructuredPrompt:
        da = inputs.data_analysis
        analysis = inputs.analysis

        parts = [
            "Develop a winning bid strategy from the analysis below.",
            section(
                "Opportunity",
                "\n".join([
                    f"Contract type: {da.contract_info.type}",
                    f"Scope: {da.contract_info.scope}",
                    f"Entity capability: {da.entity_info.primary_capability}",
                    f"Competitive positioning: {da.opportunity_assessment.competitive_positioning or 'Not assessed'}",
                    f"Value proposition: {da.opportunity_assessment.value_proposition or 'Not assessed'}",
                    f"Estimated win probability: {da.opportunity_assessment.estimated_win_probability:g}%",
                ]),
            ),
            section("Requirements", bullet_list(analysis.requirements)),
            section("Gaps", bullet_list(analysis.gaps, empty="None identified")),
            section("Risk factors", bullet_list(analysis.risk_factors, empty="None identified")),
            section("Opportunities", bullet_list(analysis.opportunities)),
            section("Compliance items", bullet_list(analysis.compliance_items)),
            section(
                "Insights",
                "\n".join([
                    f"NAICS strategy: {analysis.insights.naics_strategy}",
                    f"Competitive advantage: {analysis.insights.competitive_advantage}",
                    f"Risk mitigation: {analysis.insights.risk_mitigation}",
                ]),
            ),
            section("Payment terms", bullet_list(da.pricing_and_terms.payment_terms)),
            STRATEGY_SYNTHESIS_INSTRUCTIONS,
        ]
        return StructuredPrompt(
            system=STRATEGY_SYNTHESIS_SYSTEM_PROMPT,
            user="\n\n".join(parts),
            name=self.stage.value,
        )

    def digest(self, output: Strategy) -> dict[str, int]:
        return {
            "value_propositions": len(output.value_propositions),
            "key_messages": len(output.content_strategy.key_messages),
            "win_probability": round(output.win_probability),
        }

    def summarize(self, output: Strategy) -> str:
        return f"Strategy developed - {output.win_probability:g}% win probability"
