"""Emergency assistance resource selection.

EmergencyResourceAdvisor classifies how severe a household's shortfall is and
picks which assistance programs to point them to. Programs are referenced by
id; their descriptions and contact details live with the caller.
"""

from decimal import Decimal

import structlog

from .models import ResourceAssessment, ResourceSeverity, ResponseTimeframe

logger = structlog.get_logger()


# =============================================================================
# RESOURCE IDS
# =============================================================================

DIAL_211 = "dial-211"
SALVATION_ARMY = "salvation-army"
SNAP_BENEFITS = "snap-benefits"
LIHEAP = "liheap"
WIC = "wic"
HUD_ASSISTANCE = "hud-assistance"
COMMUNITY_HEALTH_CENTERS = "community-health-centers"
NFCC_COUNSELING = "nfcc-counseling"

NATIONAL_RESOURCE_IDS = (
    DIAL_211,
    SALVATION_ARMY,
    SNAP_BENEFITS,
    LIHEAP,
    WIC,
    HUD_ASSISTANCE,
    COMMUNITY_HEALTH_CENTERS,
    NFCC_COUNSELING,
)

# =============================================================================
# NEEDS
# =============================================================================

UTILITY_ASSISTANCE = "utility_assistance"
HOUSING_ASSISTANCE = "housing_assistance"
FOOD_ASSISTANCE = "food_assistance"
FINANCIAL_COUNSELING = "financial_counseling"
FAMILY_ASSISTANCE = "family_assistance"

# Shortfall above this share of income is critical
CRITICAL_SHORTFALL_RATE = Decimal("0.5")
# Expenses above this multiple of income are severe
SEVERE_EXPENSE_RATIO = Decimal("1.2")

ONGOING_ACTIONS = (
    "ONGOING: Track all expenses daily to identify areas for reduction",
    "ONGOING: Look for additional income opportunities (gig work, benefit programs)",
)


class EmergencyResourceAdvisor:
    """Assess crisis severity and recommend assistance resources."""

    def assess(
        self,
        total_income: Decimal,
        total_expenses: Decimal,
        available_for_debt: Decimal,
        required_payments: Decimal,
        has_dependents: bool = False,
        utility_shutoff_risk: bool = False,
        eviction_risk: bool = False,
    ) -> ResourceAssessment:
        """
        Classify severity and select resources.

        Args:
            total_income: Monthly income
            total_expenses: Monthly essential needs
            available_for_debt: Monthly money available for bills
            required_payments: Minimum payments due on outstanding bills
            has_dependents: Household includes dependents
            utility_shutoff_risk: A utility shutoff is imminent
            eviction_risk: Housing is at risk

        Returns:
            ResourceAssessment with severity, needs, resource ids and action plan
        """
        shortfall = required_payments - available_for_debt
        expense_ratio = total_expenses / total_income if total_income > 0 else Decimal("0")

        if utility_shutoff_risk or eviction_risk or shortfall > total_income * CRITICAL_SHORTFALL_RATE:
            severity = ResourceSeverity.CRITICAL
            timeframe = ResponseTimeframe.IMMEDIATE
        elif shortfall > available_for_debt or expense_ratio > SEVERE_EXPENSE_RATIO:
            severity = ResourceSeverity.SEVERE
            timeframe = ResponseTimeframe.WITHIN_WEEK
        else:
            severity = ResourceSeverity.MODERATE
            timeframe = ResponseTimeframe.WITHIN_MONTH

        needs: list[str] = []
        if utility_shutoff_risk:
            needs.append(UTILITY_ASSISTANCE)
        if eviction_risk:
            needs.append(HOUSING_ASSISTANCE)
        if expense_ratio > 1:
            needs.append(FOOD_ASSISTANCE)
        if shortfall > available_for_debt * 2:
            needs.append(FINANCIAL_COUNSELING)
        if has_dependents:
            needs.append(FAMILY_ASSISTANCE)

        assessment = ResourceAssessment(
            severity=severity,
            primary_needs=needs,
            timeframe=timeframe,
            recommended_resources=self.resources_for_needs(needs, severity),
            action_plan=self.action_plan(severity, needs),
        )
        logger.info(
            "crisis_resources_assessed",
            severity=severity.value,
            needs=needs,
            resources=len(assessment.recommended_resources),
        )
        return assessment

    def resources_for_needs(self, needs: list[str], severity: ResourceSeverity) -> list[str]:
        """Resource ids for the given needs; 2-1-1 is always first."""
        resources = [DIAL_211]

        if UTILITY_ASSISTANCE in needs:
            resources.append(LIHEAP)
        if FOOD_ASSISTANCE in needs:
            resources.append(SNAP_BENEFITS)
            if FAMILY_ASSISTANCE in needs:
                resources.append(WIC)
        if HOUSING_ASSISTANCE in needs:
            resources.append(HUD_ASSISTANCE)
        if FINANCIAL_COUNSELING in needs or severity == ResourceSeverity.CRITICAL:
            resources.append(NFCC_COUNSELING)
        if severity in (ResourceSeverity.SEVERE, ResourceSeverity.CRITICAL):
            resources.append(SALVATION_ARMY)
            resources.append(COMMUNITY_HEALTH_CENTERS)

        return resources

    def action_plan(self, severity: ResourceSeverity, needs: list[str]) -> list[str]:
        """Step-by-step plan, most urgent step first."""
        actions: list[str] = []

        if severity == ResourceSeverity.CRITICAL:
            actions.append("IMMEDIATE: Call 2-1-1 right now for emergency assistance referrals")
            if UTILITY_ASSISTANCE in needs:
                actions.append(
                    "TODAY: Contact your utility companies to prevent shutoffs - "
                    "many have emergency payment programs"
                )
            if HOUSING_ASSISTANCE in needs:
                actions.append(
                    "TODAY: Contact your landlord/mortgage company to discuss "
                    "emergency payment arrangements"
                )
            actions.append("THIS WEEK: Apply for SNAP benefits and local food assistance programs")
            actions.append(
                "THIS WEEK: Visit local Salvation Army or Catholic Charities for "
                "emergency financial aid"
            )
            actions.append("WITHIN 3 DAYS: Schedule appointment with non-profit credit counselor")
        elif severity == ResourceSeverity.SEVERE:
            actions.append("WITHIN 24 HOURS: Call 2-1-1 to identify local assistance programs")
            actions.append(
                "THIS WEEK: Contact creditors to negotiate payment plans before "
                "accounts become delinquent"
            )
            actions.append("THIS WEEK: Apply for utility assistance programs (LIHEAP) if eligible")
            actions.append("WITHIN 2 WEEKS: Schedule credit counseling appointment")
        else:
            actions.append("WITHIN WEEK: Research local assistance programs by calling 2-1-1")
            actions.append("WITHIN 2 WEEKS: Contact creditors proactively to discuss payment options")
            actions.append("WITHIN MONTH: Consider credit counseling to create sustainable budget plan")

        actions.extend(ONGOING_ACTIONS)
        return actions


__all__ = ["EmergencyResourceAdvisor", "NATIONAL_RESOURCE_IDS"]
