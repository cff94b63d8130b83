"""
Customer personas for the sales trainer.

Each (difficulty, product) pair maps to an opening line the simulated customer
sends before the trainee types anything, plus the behavior block forwarded to
the language model. Lookups never fail: unknown keys go through the explicit
resolvers below.
"""

from __future__ import annotations

from typing import Dict

from loguru import logger

from .states import Difficulty, Product


DEFAULT_DIFFICULTY = Difficulty.MEDIUM
DEFAULT_PRODUCT = Product.CHECKING_ACCOUNT


DIFFICULTY_LABELS: Dict[Difficulty, str] = {
    Difficulty.EASY: "Cliente Fácil",
    Difficulty.MEDIUM: "Cliente Médio",
    Difficulty.HARD: "Cliente Difícil",
}

DIFFICULTY_DESCRIPTIONS: Dict[Difficulty, str] = {
    Difficulty.EASY: "Cliente receptivo e interessado nos produtos",
    Difficulty.MEDIUM: "Cliente com dúvidas e necessita de convencimento",
    Difficulty.HARD: "Cliente resistente e com muitas objeções",
}

PRODUCT_LABELS: Dict[Product, str] = {
    Product.CHECKING_ACCOUNT: "Conta Corrente",
    Product.CREDIT_CARD: "Cartão de Crédito",
    Product.INVESTMENTS: "Investimentos",
    Product.LOAN: "Empréstimos",
    Product.CAPITALIZATION_BOND: "Capitalização",
    Product.INSURANCE: "Seguros",
}

PRODUCT_DESCRIPTIONS: Dict[Product, str] = {
    Product.CHECKING_ACCOUNT: "Venda conta corrente e serviços bancários",
    Product.CREDIT_CARD: "Ofereça cartões com benefícios exclusivos",
    Product.INVESTMENTS: "Apresente CDB, fundos e previdência",
    Product.LOAN: "Ofereça crédito pessoal e consignado",
    Product.CAPITALIZATION_BOND: "Apresente títulos de capitalização",
    Product.INSURANCE: "Ofereça seguros de vida, auto e residencial",
}


GREETINGS: Dict[Difficulty, Dict[Product, str]] = {
    Difficulty.EASY: {
        Product.CHECKING_ACCOUNT: "Olá! Tudo bem? Estou procurando uma conta corrente nova. Vocês podem me ajudar?",
        Product.CREDIT_CARD: "Oi, tudo bem? Estou querendo um cartão de crédito com bons benefícios. O que vocês têm?",
        Product.INVESTMENTS: "Olá! Juntei um dinheirinho e quero começar a investir. Podem me explicar as opções?",
        Product.LOAN: "Oi! Estou precisando de um empréstimo para reformar a casa. Como funciona aqui?",
        Product.CAPITALIZATION_BOND: "Olá! Ouvi falar de título de capitalização e fiquei curioso. Como funciona?",
        Product.INSURANCE: "Oi, tudo bem? Estou pensando em fazer um seguro. Vocês podem me mostrar as opções?",
    },
    Difficulty.MEDIUM: {
        Product.CHECKING_ACCOUNT: "Oi. Eu já tenho conta em outro banco, mas queria saber o que vocês oferecem. O que vocês têm de diferente?",
        Product.CREDIT_CARD: "Oi. Já tenho cartão sem anuidade em outro banco. O que o cartão de vocês oferece a mais?",
        Product.INVESTMENTS: "Boa tarde. Hoje eu invisto em CDB por outra corretora. Por que eu traria meu dinheiro para cá?",
        Product.LOAN: "Olá. Estou pesquisando empréstimo em alguns bancos. Qual é a taxa de vocês, de verdade?",
        Product.CAPITALIZATION_BOND: "Oi. Já me ofereceram capitalização antes e não vi vantagem. O que o de vocês tem de diferente?",
        Product.INSURANCE: "Olá. Já tenho seguro do carro com outra seguradora. O que vocês oferecem que valha a troca?",
    },
    Difficulty.HARD: {
        Product.CHECKING_ACCOUNT: "Olha, já tenho conta em três bancos e francamente não estou muito satisfeito com nenhum. Por que eu deveria considerar abrir conta aqui?",
        Product.CREDIT_CARD: "Já tive cartão de vocês e me cobraram anuidade que disseram que era grátis. Vai me oferecer isso de novo?",
        Product.INVESTMENTS: "Da última vez que um gerente me indicou investimento, perdi dinheiro. Não sei por que estou aqui de novo.",
        Product.LOAN: "Olha, empréstimo de banco é sempre juros abusivo disfarçado. Me convence do contrário, se conseguir.",
        Product.CAPITALIZATION_BOND: "Capitalização? Isso aí é só para o banco ganhar dinheiro em cima da gente. Já caí nessa uma vez.",
        Product.INSURANCE: "Paguei seguro por anos e, quando precisei, não cobriram nada. Por que eu confiaria em vocês agora?",
    },
}


_BEHAVIOR: Dict[Difficulty, str] = {
    Difficulty.EASY: """PERSONALIDADE - CLIENTE FÁCIL:
- Você é MUITO receptivo e animado com a ideia
- Está realmente precisando/procurando esse produto agora
- Faz apenas 1-2 perguntas simples para confirmar o interesse
- Aceita facilmente as explicações do vendedor
- Mostra entusiasmo: "Nossa, que legal!", "Parece ótimo!"
- Após 2-3 trocas de mensagens, se as respostas forem satisfatórias, você DECIDE FECHAR
- Quando decidir fechar, diga algo como "Perfeito! Quero sim, como faço para contratar?" e termine com [VENDA_FECHADA]
Exemplo: "Que legal! E é sem taxa mesmo? Parece ótimo para mim!\"""",
    Difficulty.MEDIUM: """PERSONALIDADE - CLIENTE MÉDIO:
- Você já tem conta em outro banco e está avaliando com cuidado
- É educado mas cético, precisa de MUITO convencimento
- Faz MUITAS perguntas específicas e técnicas sobre o produto
- Compara detalhadamente: "No meu banco atual eu tenho X e pago Y..."
- Questiona taxas, benefícios, diferenciais, letras miúdas
- Pede exemplos práticos e casos de uso
- Menciona promoções específicas de outros bancos (Itaú, Santander, etc.)
- Exige que o vendedor demonstre conhecimento real do produto
- Só fecha a venda após 5-7 trocas de mensagens SE o vendedor demonstrar domínio
- Se as respostas não forem convincentes após várias perguntas, você DESISTE com [VENDA_PERDIDA]
- Se o vendedor te convencer com argumentos sólidos, você aceita com [VENDA_FECHADA]
Exemplo: "Entendi, mas no Santander eu já tenho cartão sem anuidade e 50% de desconto no Uber. Além disso, eles me dão 2 pontos por dólar. O que vocês oferecem de diferente que justifique eu trocar?\"""",
    Difficulty.HARD: """PERSONALIDADE - CLIENTE DIFÍCIL/ATRITADO:
- Você JÁ TEVE PROBLEMAS com este banco ou com bancos em geral
- Está irritado, desconfiado e MUITO cético
- Menciona logo de cara: "Já tive problema com vocês antes..." ou "Bancos sempre prometem e não cumprem..."
- É direto, impaciente e até um pouco rude
- Interrompe com objeções fortes: "Isso é papo furado..."
- Questiona TUDO agressivamente: taxas escondidas, burocracias, letras miúdas
- Compara de forma negativa: "Já vi isso em outros bancos e foi só propaganda"
- Não acredita em promessas e exige PROVAS concretas
- É muito difícil de convencer - precisa de EMPATIA e REVERSÃO genuína da situação
- Só fecha após o vendedor reconhecer o problema, mostrar empatia real e apresentar soluções concretas (8-10+ mensagens)
- Se o vendedor não lidar bem com as objeções, você DESISTE rapidamente com [VENDA_PERDIDA]
- Se o vendedor conseguir reverter com empatia e soluções reais, você pode aceitar com [VENDA_FECHADA]
Exemplo: "Olha, eu já tive conta aí e foi um pesadelo. Cobraram taxas que não me avisaram e quando reclamei, ninguém resolveu. Por que eu deveria confiar de novo?\"""",
}


def resolve_difficulty(value) -> Difficulty:
    """Map an enum member or wire value to a Difficulty; unknown -> MEDIUM."""
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(value)
    except ValueError:
        logger.warning(f"persona_fallback | difficulty={value!r} -> {DEFAULT_DIFFICULTY.value}")
        return DEFAULT_DIFFICULTY


def resolve_product(value) -> Product:
    """Map an enum member or wire value to a Product; unknown -> CHECKING_ACCOUNT."""
    if isinstance(value, Product):
        return value
    try:
        return Product(value)
    except ValueError:
        logger.warning(f"persona_fallback | product={value!r} -> {DEFAULT_PRODUCT.value}")
        return DEFAULT_PRODUCT


def greeting(difficulty, product) -> str:
    table = GREETINGS[resolve_difficulty(difficulty)]
    # Tables may lag behind new products; the checking-account line covers them.
    return table.get(resolve_product(product), table[DEFAULT_PRODUCT])


def instructions(difficulty, product) -> str:
    d = resolve_difficulty(difficulty)
    p = resolve_product(product)
    return f"{_BEHAVIOR[d]}\n\nProduto em negociação: {PRODUCT_LABELS[p]}."


def difficulty_label(difficulty) -> str:
    return DIFFICULTY_LABELS[resolve_difficulty(difficulty)]


def product_label(product) -> str:
    return PRODUCT_LABELS[resolve_product(product)]
