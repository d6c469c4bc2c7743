"""
Prompts
System and user prompts of the vision and recommendation steps
"""

VISION_SYSTEM_PROMPT = """Você é um especialista em análise visual de conteúdo para redes sociais.
Analise a imagem fornecida e retorne um JSON com a seguinte estrutura:
{{
  "dominantColors": ["#hex1", "#hex2", "#hex3"],
  "colorMood": "quente/frio/neutro/vibrante/suave",
  "style": "minimalista/moderno/vintage/profissional/casual/luxuoso/artístico",
  "composition": "centralizado/regra-dos-tercos/simetrico/dinamico/enquadramento-fechado",
  "hasText": true/false,
  "textContent": "texto visível na imagem ou null",
  "hasProduct": true/false,
  "productType": "tipo do produto se houver ou null",
  "hasPerson": true/false,
  "personContext": "descricao da pessoa se houver ou null",
  "visualElements": ["elemento1", "elemento2"],
  "brandingElements": ["logo", "cores-da-marca"],
  "qualityScore": 1-10,
  "engagementPotential": "baixo/medio/alto",
  "suggestedImprovements": ["sugestao1", "sugestao2"]
}}
{context}
Seja preciso e objetivo na análise."""

VISION_USER_PROMPT = "Analise esta imagem de post de rede social e retorne o JSON com a análise."


RECOMMENDATIONS_SYSTEM_PROMPT = (
    "Você é um estrategista de marketing digital expert. Responda apenas em JSON válido."
)

RECOMMENDATIONS_PROMPT = """Crie recomendações estratégicas de Instagram para o cliente {client_name}, do nicho "{niche}".

## Concorrentes analisados
{competitors_context}

## Contexto do nicho
- Tendências: {trends}
- Lacunas de conteúdo: {content_gaps}
- Hashtags populares: {popular_hashtags}
{visual_leader}

Retorne um JSON com exatamente estes campos:
{{
  "currentSituation": "análise da situação atual do mercado em 1-3 parágrafos",
  "strategicPaths": [
    {{
      "name": "nome do caminho",
      "description": "descrição",
      "difficulty": "easy/medium/hard",
      "timeToResults": "ex: 2-3 meses",
      "requiredResources": ["recurso"],
      "expectedOutcomes": ["resultado"],
      "actionSteps": ["passo"]
    }}
  ],
  "contentRecommendations": [
    {{
      "type": "reels/carousel/stories/feed",
      "theme": "tema",
      "frequency": "frequência",
      "bestTimes": ["HH:MM"],
      "hashtags": ["#hashtag"],
      "exampleIdeas": ["ideia"]
    }}
  ],
  "urgentActions": ["ação"],
  "longTermGoals": ["meta"]
}}

Inclua de 3 a 5 caminhos estratégicos e de 3 a 4 recomendações de conteúdo."""
