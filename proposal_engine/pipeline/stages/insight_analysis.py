"""Stage 2: Insight Analysis."""

from dataclasses import dataclass

from proposal_engine.config.prompts import (
    INSIGHT_ANALYSIS_INSTRUCTIONS,
    INSIGHT_ANALYSIS_SYSTEM_PROMPT,
)
from proposal_engine.llm.structured import StructuredPrompt
from proposal_engine.models.enums import StageName
from proposal_engine.models.stages import Analysis, DataAnalysis
from proposal_engine.pipeline.stages.base import StageExecutor, bullet_list, section


@dataclass(frozen=True)
class InsightAnalysisInput:
    data_analysis: DataAnalysis


class InsightAnalysisStage(StageExecutor[InsightAnalysisInput, Analysis]):
    stage = StageName.INSIGHT_ANALYSIS
    schema = Analysis
    start_message = "Analyzing strategic insights and gaps..."

    def build_prompt(self, inputs: InsightAnalysisInput) -> StructuredPrompt:
        da = inputs.data_analysis
        alignment = da.gap_analysis.naics_alignment
        forms = [
            f"{f.name} ({f.criticality.value}): {f.description}"
            for f in da.compliance_requirements.required_forms
        ]

        parts = [
            "Provide strategic analysis for an RFQ response based on the structured data below.",
            section(
                "Contract",
                "\n".join([
                    f"Type: {da.contract_info.type}",
                    f"Scope: {da.contract_info.scope}",
                    f"Timeline: {da.contract_info.timeline or 'Not specified'}",
                    f"Set-aside: {da.contract_info.set_aside_type or 'None'}",
                ]),
            ),
            section("Key requirements", bullet_list(da.contract_info.key_requirements)),
            section("Deliverables", bullet_list(da.contract_info.deliverables)),
            section(
                "Entity",
                "\n".join([
                    f"Primary capability: {da.entity_info.primary_capability}",
                    f"Business type: {da.entity_info.business_type or 'Not specified'}",
                ]),
            ),
            section("Relevant experience", bullet_list(da.entity_info.relevant_experience)),
            section("Competitive advantages", bullet_list(da.entity_info.competitive_advantages)),
            section(
                "NAICS alignment",
                f"Required: {alignment.required}\n"
                f"Entity primary: {alignment.entity_primary or 'none'}\n"
                f"Match: {'yes' if alignment.is_match else 'no'}",
            ),
            section("Capability gaps", bullet_list(da.gap_analysis.capability_gaps, empty="None identified")),
            section("Compliance gaps", bullet_list(da.gap_analysis.compliance_gaps, empty="None identified")),
            section("Risk factors", bullet_list(da.gap_analysis.risk_factors, empty="None identified")),
            section("Win factors", bullet_list(da.opportunity_assessment.win_factors)),
            section(
                "Estimated win probability",
                f"{da.opportunity_assessment.estimated_win_probability:g}%",
            ),
            section("Required forms", bullet_list(forms, empty="None listed")),
            section("Certifications", bullet_list(da.compliance_requirements.certifications)),
            INSIGHT_ANALYSIS_INSTRUCTIONS,
        ]
        return StructuredPrompt(
            system=INSIGHT_ANALYSIS_SYSTEM_PROMPT,
            user="\n\n".join(parts),
            name=self.stage.value,
        )

    def digest(self, output: Analysis) -> dict[str, int]:
        return {
            "requirements": len(output.requirements),
            "gaps": len(output.gaps),
            "risk_factors": len(output.risk_factors),
            "opportunities": len(output.opportunities),
            "compliance_items": len(output.compliance_items),
        }

    def summarize(self, output: Analysis) -> str:
        return f"Analysis complete - {len(output.gaps)} gaps identified"
