"""The sample mindmap written by ``mindmap-canvas new``."""

from mindmap_canvas.models.node import ROOT_ID, Node


def sample_tree() -> Node:
    return Node(
        id=ROOT_ID,
        title="Modern Web Development",
        summary="Complete ecosystem of web technologies",
        description=(
            "Comprehensive overview of modern web development including frontend frameworks, "
            "backend technologies, databases, and deployment strategies."
        ),
        children=(
            Node(
                id="frontend",
                title="Frontend Development",
                summary="Client-side technologies",
                description=(
                    "Frontend development focuses on creating user interfaces and experiences."
                ),
                children=(
                    Node(
                        id="react",
                        title="React",
                        summary="Component-based UI library",
                        description="React is a JavaScript library for building user interfaces.",
                    ),
                    Node(
                        id="vue",
                        title="Vue.js",
                        summary="Progressive framework",
                        description=(
                            "Vue.js is an approachable framework for building web interfaces."
                        ),
                    ),
                ),
            ),
            Node(
                id="backend",
                title="Backend Development",
                summary="Server-side logic",
                description=(
                    "Backend development handles server-side operations and business logic."
                ),
                children=(
                    Node(
                        id="nodejs",
                        title="Node.js",
                        summary="JavaScript runtime",
                        description="Node.js enables JavaScript execution on servers.",
                    ),
                    Node(
                        id="python",
                        title="Python",
                        summary="Versatile language",
                        description="Python offers frameworks like Django and Flask.",
                    ),
                ),
            ),
            Node(
                id="devops",
                title="DevOps",
                summary="Infrastructure & CI/CD",
                description="DevOps practices streamline development and operations.",
                children=(
                    Node(
                        id="docker",
                        title="Docker",
                        summary="Containerization",
                        description="Docker packages applications into containers.",
                    ),
                ),
            ),
        ),
    )
