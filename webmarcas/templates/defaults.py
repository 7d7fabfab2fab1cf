"""Default legal document templates with ``{{var}}`` placeholders."""

from __future__ import annotations

CONTRACTOR_NAME = "WEB MARCAS PATENTES EIRELI"
CONTRACTOR_CNPJ = "39.528.012/0001-29"

DEFAULT_CONTRACT_TEMPLATE = """CONTRATO PARTICULAR DE PRESTAÇÃO DE SERVIÇOS DE ASSESSORAMENTO PARA REGISTRO DE MARCA JUNTO AO INPI

Por este instrumento particular de prestação de serviços, que fazem, de um lado:

I) WEB MARCAS PATENTES EIRELI, com sede na cidade de SÃO PAULO, Estado de SP, na AVENIDA BRIGADEIRO LUIS ANTONIO, Nº: 2696, CEP: 01402-000, inscrita no CNPJ/MF sob o Nº: 39.528.012/0001-29, neste ato representada por seu titular, senhor Davilys Danques de Oliveira Cunha, brasileiro, casado, regularmente inscrito no RG sob o Nº 50.688.779-0 e CPF sob o Nº 393.239.118-79, a seguir denominada CONTRATADA.

II) {{razao_social_ou_nome}}, {{dados_cnpj}}com sede na {{endereco_completo}}, neste ato representada por {{nome_cliente}}, CPF sob o nº {{cpf}}, com endereço de e-mail para faturamento {{email}} e Tel: {{telefone}}, ("Contratante").

As partes celebram o presente Acordo de Tarifas, que se regerá pelas cláusulas e condições abaixo:

1. CLÁUSULA PRIMEIRA – DO OBJETO

1.1 A CONTRATADA prestará os serviços de preparo, protocolo e acompanhamento do pedido de registro da marca "{{marca}}" junto ao INPI até a conclusão do processo, no ramo de atividade: {{ramo_atividade}}.

2. CLÁUSULA SEGUNDA – DA RESPONSABILIDADE SOBRE OS SERVIÇOS CONTRATADOS

2.1 Executar os serviços com responsabilidade e qualidade;
2.2 Fornecer cópia digital dos atos praticados junto ao INPI;
2.3 Comunicar à CONTRATANTE eventuais impedimentos ou exigências;
2.4 Acompanhar semanalmente o processo no INPI e informar colidências, exigências ou publicações;
2.5 Garantir o investimento da CONTRATANTE com nova tentativa sem custos adicionais de honorários caso o registro seja negado.

3. CLÁUSULA TERCEIRA - DAS OBRIGAÇÕES GERAIS DA CONTRATADA

3.1 Enviar cópias digitais por e-mail e relatório anual do processo;
3.2 Executar os serviços conforme o contrato e a legislação;
3.3 Cumprir prazos e exigências do INPI;
3.4 Comunicar impedimentos imediatamente, a fim de cumprir as normas do INPI para garantir o registro.

4. CLÁUSULA QUARTA – DAS OBRIGAÇÕES GERAIS DA CONTRATANTE

4.1 A CONTRATANTE obriga-se a efetuar os pagamentos na forma, prazos e condições estabelecidas neste instrumento.
4.2 A CONTRATANTE compromete-se a fornecer à CONTRATADA todas as informações, documentos e materiais solicitados, de forma completa e dentro dos prazos estipulados.
4.3 A CONTRATANTE poderá solicitar ajustes ou correções nos serviços prestados somente quando houver divergência comprovada com o objeto deste contrato.
4.4 A CONTRATANTE reconhece que a CONTRATADA atua como assessoria técnica e jurídica especializada, sendo que a decisão final sobre a concessão do registro de marca cabe exclusivamente ao INPI.

5. CLÁUSULA QUINTA – DAS CONDIÇÕES DE PAGAMENTO

5.1 Os pagamentos à CONTRATADA serão efetuados conforme a opção escolhida:
{{forma_pagamento_detalhada}}
5.2 Taxas do INPI: As taxas federais obrigatórias (GRU) serão de responsabilidade exclusiva do CONTRATANTE, devendo ser recolhidas diretamente ao INPI.
5.3 O cadastro do CONTRATANTE junto ao INPI é realizado pela CONTRATADA previamente ao pagamento das taxas federais.
5.4 Em caso de parcelamento, o atraso de qualquer parcela implicará no vencimento antecipado de todas as demais, com acréscimo de multa e juros conforme cláusula sétima.

6. CLÁUSULA SEXTA – DO PRAZO DE VIGÊNCIA

6.1 O presente contrato terá vigência a partir da data de sua assinatura e perdurará até o final do decênio de registro de marca junto ao INPI, podendo ser renovado mediante termo aditivo.

7. CLÁUSULA SÉTIMA – DA INADIMPLÊNCIA

7.1 No caso de inadimplência, a CONTRATANTE estará sujeita a:
a) Multa de 10% (dez por cento) sobre o valor total devido;
b) Juros de mora de 1% (um por cento) ao mês;
c) Correção monetária pelo IGPM/FGV;
d) Suspensão imediata dos serviços até a regularização do débito;
e) Inscrição em cadastros de proteção ao crédito após 30 dias de inadimplência.

8. CLÁUSULA OITAVA – DA CONFIDENCIALIDADE

8.1 As partes se comprometem a manter em sigilo absoluto todas as informações confidenciais trocadas durante a execução do contrato, incluindo dados pessoais, comerciais e estratégicos.
8.2 Esta obrigação de confidencialidade permanecerá vigente por prazo indeterminado, mesmo após o término deste contrato.

9. CLÁUSULA NONA – DA RESCISÃO

9.1 Este contrato poderá ser rescindido por qualquer das partes mediante aviso prévio de 30 (trinta) dias, por escrito.
9.2 A CONTRATANTE somente poderá cancelar o contrato se não houver débitos pendentes com a CONTRATADA.
9.3 Em caso de rescisão antecipada por iniciativa da CONTRATANTE, não haverá devolução de valores já pagos referentes a serviços executados ou em andamento.

10. CLÁUSULA DÉCIMA – DAS CONDIÇÕES GERAIS

10.1 Fica pactuada entre as partes a prestação dos serviços de acompanhamento e vigilância do(s) processo(s) referentes à marca {{marca}}.
10.2 Durante a tramitação do processo junto ao INPI, poderão surgir situações que exijam a apresentação de documentos adicionais, os quais deverão ser providenciados pela CONTRATANTE em tempo hábil.
10.3 A CONTRATADA não se responsabiliza por decisões do INPI contrárias ao pedido de registro, desde que tenha cumprido integralmente suas obrigações contratuais.

11. CLÁUSULA DÉCIMA PRIMEIRA – DAS DISPOSIÇÕES FINAIS

11.1 Este contrato representa o acordo integral entre as partes, substituindo quaisquer negociações ou acordos anteriores, verbais ou escritos.
11.2 A tolerância de uma das partes quanto ao descumprimento de qualquer obrigação pela outra não implica novação ou renúncia de direitos.
11.3 Qualquer alteração deste contrato somente será válida se formalizada por escrito e assinada por ambas as partes.

12. CLÁUSULA DÉCIMA SEGUNDA – DO FORO

12.1 Para dirimir quaisquer dúvidas ou controvérsias oriundas do presente instrumento, as partes elegem o Foro da Comarca de São Paulo – SP, com renúncia expressa a qualquer outro, por mais privilegiado que seja.

Por estarem justas e contratadas, as partes assinam o presente instrumento em 02 (duas) vias de igual teor e forma, na presença das testemunhas abaixo.

São Paulo, {{data_extenso}}.

CONTRATADA:
WEB MARCAS PATENTES EIRELI
CNPJ: 39.528.012/0001-29

CONTRATANTE:
{{nome_cliente}}
CPF/CNPJ: {{cpf_cnpj}}"""

# Clause 5.1 once the promotional price is no longer available.
STANDARD_PRICE_CLAUSE_51 = """5.1 Os pagamentos à CONTRATADA serão efetuados conforme a opção escolhida pelo CONTRATANTE:

• Pagamento à vista: R$ 1.194,00 (mil cento e noventa e quatro reais).
• Pagamento parcelado via boleto bancário: 3 (três) parcelas de R$ 398,00 (trezentos e noventa e oito reais).
• Pagamento parcelado via cartão de crédito: 6 (seis) parcelas de R$ 199,00 (cento e noventa e nove reais) sem incidência de juros.

"""

PROCURACAO_TEMPLATE = """OUTORGANTE:

{{nome_empresa}}, pessoa jurídica de direito privado, inscrita no CNPJ sob o nº {{cnpj}}, com sede na {{endereco}}, {{cidade}} - {{estado}}, CEP {{cep}}, neste ato representada por {{nome_representante}}, portador(a) do CPF nº {{cpf_representante}}.

Pelo presente instrumento particular de PROCURAÇÃO, o(a) outorgante acima identificado(a) nomeia e constitui como seu bastante PROCURADOR o Sr. Davilys Danques de Oliveira Cunha, brasileiro, casado, portador do RG nº 50.688.779-0 e CPF nº 393.239.118-79, com endereço profissional na Av. Brigadeiro Luís Antônio, nº 2696, Centro, São Paulo - SP, para representá-lo(a) de forma exclusiva junto ao INSTITUTO NACIONAL DA PROPRIEDADE INDUSTRIAL – INPI, podendo praticar todos os atos necessários, legais e administrativos relacionados ao pedido, acompanhamento, defesa e manutenção do registro de marca, inclusive apresentação de requerimentos, cumprimento de exigências, interposição de recursos e recebimento de notificações.

A presente procuração é válida pelo prazo indeterminado, podendo ser revogada a qualquer tempo mediante comunicação expressa ao procurador.

São Paulo, {{data_extenso}}."""

_DISTRATO_PARTIES = """I) WEB MARCAS PATENTES EIRELI, com sede na cidade de SÃO PAULO, Estado de SP, na AVENIDA PRESTES MAIA, Nº: 241, CEP:01031-001, inscrita no CNPJ/MF sob o Nº:39.528.012/0001-29, na cidade de SÃO PAULO, Estado de SP (" WebMarcas ");

Pelo presente instrumento as partes abaixo qualificadas:

II) A pessoa física ou jurídica que preencheu e enviou à WebMarcas o cadastro necessário para criação e verificação de conta junto à WebMarcas, identificada pelo presente instrumento particular que o fazem parte, de um lado ora a CONTRATANTE: {{nome_empresa}}, com sede na {{endereco}}, na cidade de {{cidade}}, estado de {{estado}}, CEP {{cep}}, inscrita no CNPJ/ sob nº {{cnpj}}, neste ato representada por {{nome_representante}}, CPF sob o n⁰ {{cpf_representante}}, com endereço de e-mail para faturamento {{email}} e Tel; {{telefone}}, ("Contratante").

As partes celebram o presente Acordo de Tarifas, que se regerá pelas cláusulas e condições abaixo:

"""

DISTRATO_MULTA_TEMPLATE = _DISTRATO_PARTIES + """1. DO OBJETO E CONSIDERAÇÕES DO CONTRATO
1.2. O presente contrato tem como OBJETO a parceria celebrada entre as partes, com o objetivo de preparar e depositar o registro da marca junto ao INSTITUTO NACIONAL DA PROPRIEDADE INDUSTRIAL, referente à marca {{marca}}, bem como o acompanhamento e vigilância do processo até a sua fase processual seguinte.

1.3. As partes resolvem, nesta data {{data_distrato}}, em comum acordo e no exercício de suas faculdades, dissolver todos os direitos e obrigações decorrentes do contrato de parceria celebrado entre elas. Fica estabelecido que haverá um ônus financeiro em virtude do cancelamento, correspondente ao valor de {{numero_parcela}} parcela de R${{valor_multa}}. Ressalta-se que a falta de pagamento acarretará na cobrança do valor total do serviço, sujeito a protesto.

1.4. Todas as cláusulas e condições contidas no presente contrato são consideradas DISTRATADAS a partir desta data. As partes declaram, por meio deste instrumento e nos termos da lei, quitação total e irrestrita de todos os direitos e obrigações decorrentes do contrato de parceria, não existindo pendências recíprocas.

1.5. Este Distrato passa a vigorar entre as partes a partir da data de assinatura, independentemente do estágio de desenvolvimento financeiro das partes.

2. ELEIÇÃO DE FORO
2.1 Fica eleito o Foro da Comarca de São Paulo como o competente para dirimir as questões suscitadas com base no presente Contrato, renunciando as partes a outros Foros, por mais privilegiados que sejam.

São Paulo, {{data_extenso}}."""

DISTRATO_SEM_MULTA_TEMPLATE = _DISTRATO_PARTIES + """1. DO OBJETO E CONSIDERAÇÕES DO CONTRATO
1.2. O presente tem como OBJETO o contrato de parceria celebrado entre as partes neste mencionado, o qual teve como fundamento, o seguinte: (Preparo de depósito de registro de marca junto ao INSTITUTO NACIONAL DA PROPRIEDADE INDUSTRIAL, marca; {{marca}}, bem como acompanhamento e vigilância até sua faze processual seguinte).

1.3. As partes resolvem, nesta data {{data_distrato}}, em comum acordo, nas razões de suas faculdades, dissolver quaisquer direitos e obrigações oriundas do contrato de parceria firmado entre elas, de forma que não restar resquícios de ônus financeiro obrigacional relativos ao mesmo.

1.4. Todas as cláusulas e condições contidas no presente restam desde já DISTRATADAS. Afirmam por este e na forma de Direito, dando total e irrestrita quitação sobre todos os direitos e obrigações oriundas do contrato de parceria, não havendo quaisquer pendências recíprocas.

1.5. Seja em qualquer tempo ou grau de desenvolvimento financeiro do DISTRATANTE e DISTRATADO, em função dos termos, o presente. Distrato passa a vigorar entre as partes á partir da assinatura do mesmo.

2.1 Fica eleito o Foro da Comarca de São Paulo, como o competente para dirimir as questões suscitadas com base no presente Contrato, renunciando as partes a outros Foros, por mais privilegiados que sejam.

São Paulo, {{data_extenso}}."""

DOCUMENT_TEMPLATE_REGISTRY = {
    "procuracao": PROCURACAO_TEMPLATE,
    "distrato_multa": DISTRATO_MULTA_TEMPLATE,
    "distrato_sem_multa": DISTRATO_SEM_MULTA_TEMPLATE,
}

DOCUMENT_TITLES = {
    "contrato": "Contrato de Registro de Marca",
    "procuracao": "Procuração INPI",
    "distrato_multa": "Distrato com Multa",
    "distrato_sem_multa": "Distrato sem Multa",
}
