from rook_web.domain.models import AnalysisInput, AnalysisMode

DEMO_AUDIT = """Product: "DevStream"
Type: SaaS Project Management Tool for Developers

Landing Page Copy:
Welcome to DevStream. The best tool for coding teams.
We have features like boards and charts.
It is easy to track your bugs here.
Our pricing is very affordable at $10/user.
Sign up today to get started.
We integrate with GitHub and stuff.
Teams love us because we are simple.
Stop missing deadlines."""

DEMO_IDEA = """Idea: "PlantPal"
Concept: An AI-powered mobile app that identifies houseplant diseases from photos and sets up automatic watering reminders based on local humidity and plant type.
Target: Urban millennials who kill their plants but want a green apartment.
Monetization: $5/month subscription for unlimited diagnoses."""

DEMO_COMPARE_A = """Product: "TaskFlow" (My Product)
Copy: Manage your tasks simply. Drag and drop interface. Good for small teams. $10/month. We have a mobile app."""

DEMO_COMPARE_B = """Product: "Asana" (Competitor)
Copy: The #1 AI-driven work management platform. Streamline workflows, automate repetitive tasks, and see project progress in real-time. Trusted by 80% of Fortune 100. Enterprise-grade security."""


def demo_inputs(mode: AnalysisMode) -> AnalysisInput:
    mode = AnalysisMode(mode)
    if mode == AnalysisMode.AUDIT:
        return AnalysisInput(primary_text=DEMO_AUDIT)
    if mode == AnalysisMode.IDEA:
        return AnalysisInput(primary_text=DEMO_IDEA)
    return AnalysisInput(primary_text=DEMO_COMPARE_A, secondary_text=DEMO_COMPARE_B)
